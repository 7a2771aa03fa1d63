"""Structured logging helpers with extraction-run correlation context."""

from __future__ import annotations

import contextvars
import functools
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)
_SOURCE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "source", default="-"
)

_T = TypeVar("_T")

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | phase=%(phase)s | "
    "source=%(source)s | %(name)s | %(message)s"
)


class _RunContextFilter(logging.Filter):
    """Inject run/phase/source correlation fields into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        record.source = _SOURCE_VAR.get("-")
        return True


def _ensure_filter_on_root_handlers() -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        has_filter = any(isinstance(f, _RunContextFilter) for f in handler.filters)
        if not has_filter:
            handler.addFilter(_RunContextFilter())


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging format with run/phase context."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)
    _ensure_filter_on_root_handlers()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the extraction run correlation ID."""
    value = run_id or str(uuid.uuid4())
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    """Get current run correlation ID."""
    return _RUN_ID_VAR.get("-")


def get_phase() -> str:
    return _PHASE_VAR.get("-")


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Temporarily set phase context for emitted logs."""
    token = _PHASE_VAR.set(phase)
    try:
        yield
    finally:
        _PHASE_VAR.reset(token)


def with_current_context(fn: Callable[..., _T]) -> Callable[..., _T]:
    """Bind ``fn`` to a snapshot of the caller's run/phase context.

    Worker threads start with an empty context; wrapping the submitted
    callable keeps their log records correlated with the submitting run.
    """
    ctx = contextvars.copy_context()

    @functools.wraps(fn)
    def _runner(*args: Any, **kwargs: Any) -> _T:
        return ctx.copy().run(fn, *args, **kwargs)

    return _runner


def get_source() -> str:
    return _SOURCE_VAR.get("-")


@contextmanager
def source_scope(path: str) -> Iterator[None]:
    """Tag log records with the source file currently being processed."""
    token = _SOURCE_VAR.set(path)
    try:
        yield
    finally:
        _SOURCE_VAR.reset(token)
