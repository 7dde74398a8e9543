from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

addon_cancellations_total = Counter(
    "addon_cancellations_total",
    "Total processed addon cancellations by outcome",
    ["outcome"],
)

invoice_splits_total = Counter(
    "invoice_splits_total",
    "Total unpaid invoices touched by addon cancellation, by kind",
    ["kind"],
)

hook_step_failures_total = Counter(
    "hook_step_failures_total",
    "Total addon cancellation hook step failures",
    ["step"],
)


_INT_RE = re.compile(r"/\d+\b")
_PATH_PARAM_RE = re.compile(r"\{[^{}]+\}")


def _normalize_route_template(path: str) -> str:
    return _PATH_PARAM_RE.sub("{id}", path)


def _sanitize_path(path: str) -> str:
    return _INT_RE.sub("/{id}", path)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None:
        path_format = getattr(route, "path_format", None)
        if isinstance(path_format, str) and path_format:
            return _normalize_route_template(path_format)
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            return _normalize_route_template(route_path)
    return _sanitize_path(request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    status_str = str(status)
    http_requests_total.labels(method=method, path=path, status=status_str).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_addon_cancellation(outcome: str) -> None:
    addon_cancellations_total.labels(outcome=outcome).inc()


def observe_invoice_split(kind: str) -> None:
    invoice_splits_total.labels(kind=kind).inc()


def observe_hook_step_failure(step: str) -> None:
    hook_step_failures_total.labels(step=step).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
