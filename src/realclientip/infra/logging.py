"""Structured logging bootstrap.

Configures the root logger so every ``logging.getLogger(__name__)`` call
(this package, uvicorn, the host application) emits either:

* **JSON lines** (``json_output=True``, default) -- one object per
  record, ready for a log shipper.
* **Human-readable** (``json_output=False``) -- coloured,
  timestamp-prefixed lines for local development.

When OpenTelemetry tracing is active the current ``trace_id`` and
``span_id`` are added to every record, so a rejected request's
"no client IP" warning can be matched to its trace.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from realclientip.configs.system import LoggingConfig


class _TraceContextFilter(logging.Filter):
    """Injects OTEL trace/span IDs into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        if ctx and ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


def build_formatter(config: LoggingConfig) -> logging.Formatter:
    """Return the JSON or development formatter selected by *config*."""
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(trace_id)s %(span_id)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Configure the root logger (call once at startup).

    Returns the installed handler so callers and tests can inspect it.
    """
    if config is None:
        config = LoggingConfig()

    root = logging.getLogger()
    root.setLevel(config.level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_TraceContextFilter())
    handler.setFormatter(build_formatter(config))

    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvi = logging.getLogger(name)
        uvi.handlers = [handler]
        uvi.propagate = False

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
    return handler
