from contextlib import asynccontextmanager, contextmanager
import logging
from typing import Any

from fastapi import FastAPI

from billing_hooks.api.routes import router as api_router
from billing_hooks.business.addons.cancellation import addon_cancellation_service
from billing_hooks.context import correlation_scope, normalize_correlation_id
from billing_hooks.core.database import SessionLocal, get_db
from billing_hooks.core.events import InternalEvent, event_bus
from billing_hooks.logging import configure_logging
from billing_hooks.metrics import observe_addon_cancellation
from billing_hooks.middleware.correlation_id import CorrelationIdMiddleware
from billing_hooks.middleware.request_logging import RequestLoggingMiddleware


configure_logging()
logger = logging.getLogger("billing_hooks.lifecycle")


@contextmanager
def _hook_session_scope():
    override = app.dependency_overrides.get(get_db) if "app" in globals() else None
    if override is None:
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()
        return

    generator = override()
    session = next(generator)
    try:
        yield session
    finally:
        try:
            next(generator)
        except StopIteration:
            pass


def _parse_addon_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _on_addon_cancelled(event: InternalEvent) -> None:
    if not isinstance(event.payload, dict):
        return
    envelope: dict[str, Any] = event.payload

    addon_id = _parse_addon_id(envelope.get("addon_id"))
    actor = envelope.get("actor")
    if addon_id is None or not isinstance(actor, str) or not actor:
        logger.warning("addon_cancellation_hook_skipped", extra={"event_name": event.name})
        return

    with correlation_scope(normalize_correlation_id(envelope.get("correlation_id"))):
        try:
            with _hook_session_scope() as session:
                addon_cancellation_service.handle_addon_cancelled(session, actor, addon_id)
        except Exception as exc:
            observe_addon_cancellation("failed")
            logger.exception(
                "addon_cancellation_hook_failed",
                extra={"event_name": event.name, "addon_id": addon_id, "error": str(exc)[:500]},
            )


def register_event_handlers() -> None:
    event_bus.subscribe("addon.cancelled", _on_addon_cancelled)


@asynccontextmanager
async def lifespan(app: FastAPI):
    register_event_handlers()
    yield


app = FastAPI(title="Billing Hooks API", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.include_router(api_router)
