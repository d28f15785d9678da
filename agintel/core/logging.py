import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Attributes injected by the OpenTelemetry logging instrumentation.
TRACE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [trace_id=%(otelTraceID)s span_id=%(otelSpanID)s] - %(message)s"
)


def setup_logging(level: str = "INFO", *, with_trace_ids: bool = False) -> None:
    """Send job logs to stdout; safe to call more than once."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_agintel_handler", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(TRACE_LOG_FORMAT if with_trace_ids else LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    handler._agintel_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    # Engine echo and driver chatter drown out job progress
    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
