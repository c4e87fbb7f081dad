import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)


def normalize_log_level(value: str | None) -> str:
    """Extract the first word of a level string, falling back to INFO."""
    if not value or not value.split():
        return "INFO"
    level = value.split()[0].upper()
    return level if level in VALID_LOG_LEVELS else "INFO"


_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Ensure HTTP client noise only surfaces at DEBUG level."""

    noisy_level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for logger_name in NOISY_HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


class ConversationLogger:
    """Logger with correlation ID support"""

    @staticmethod
    def get_logger() -> logging.Logger:
        return logging.getLogger("llm_router.requests")

    @staticmethod
    @contextmanager
    def correlation_context(request_id: str) -> Generator[None, None, None]:
        """Tag every record emitted inside the block with ``request_id``.

        The id lives in a context variable, so overlapping requests on the
        same event loop each keep their own.
        """
        token = _correlation_id.set(request_id)
        try:
            yield
        finally:
            _correlation_id.reset(token)

    @staticmethod
    def current_correlation_id() -> str | None:
        return _correlation_id.get()


class CorrelationIdFilter(logging.Filter):
    """Copy the active correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = _correlation_id.get()
        return True


class CorrelationFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            # Prefix a copy so other handlers see the original message
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"[{correlation_id[:8]}] {record.msg}"
        return super().format(record)


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Downgrade noisy third-party HTTP logs to DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO:
            for prefix in self.prefixes:
                if record.name.startswith(prefix):
                    record.levelno = logging.DEBUG
                    record.levelname = logging.getLevelName(logging.DEBUG)
                    break
        return True


def configure_root_logging(log_level: str | None = None) -> str:
    """Install the correlation-aware stream handler on the root logger.

    Safe to call more than once; previous root handlers are replaced.

    Returns:
        The effective level name.
    """
    level = normalize_log_level(log_level)

    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    handler.setFormatter(
        CorrelationFormatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level))

    # Configure uvicorn to be quieter
    for uvicorn_logger in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(uvicorn_logger).setLevel(logging.WARNING)

    set_noisy_http_logger_levels(level)
    return level


conversation_logger = ConversationLogger.get_logger()
