from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Matches the width of the correlation_id columns.
MAX_CORRELATION_ID_LENGTH = 128

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def normalize_correlation_id(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value[:MAX_CORRELATION_ID_LENGTH] or None


@contextmanager
def correlation_scope(value: str | None) -> Iterator[str | None]:
    """Bind ``value`` as the current correlation id for the duration of the block.

    ``None`` leaves whatever id is already bound in place.
    """
    if value is None:
        yield correlation_id_var.get()
        return
    token = correlation_id_var.set(value)
    try:
        yield value
    finally:
        correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()
