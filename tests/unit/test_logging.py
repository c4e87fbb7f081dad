import asyncio
import logging
from io import StringIO

import pytest

from llm_router.core.logging import (
    NOISY_HTTP_LOGGERS,
    ConversationLogger,
    CorrelationFormatter,
    CorrelationIdFilter,
    HttpRequestLogDowngradeFilter,
    configure_root_logging,
    normalize_log_level,
    set_noisy_http_logger_levels,
)


@pytest.mark.unit
class TestHttpRequestLogDowngradeFilter:
    def setup_method(self) -> None:
        self.stream = StringIO()
        self.handler = logging.StreamHandler(self.stream)
        self.handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
        self.handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))

    def _emit(self, logger_name: str, level: int, message: str) -> str:
        logger = logging.getLogger(logger_name)
        logger.handlers = [self.handler]
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.log(level, message)
        self.handler.flush()
        output = self.stream.getvalue()
        self.stream.truncate(0)
        self.stream.seek(0)
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
        return output

    def test_downgrades_noisy_http_info_logs(self):
        output = self._emit("httpx", logging.INFO, "HTTP Request: POST")
        assert output.startswith("DEBUG:HTTP Request: POST")

    def test_keeps_warnings_from_http_loggers(self):
        output = self._emit("httpcore.connection", logging.WARNING, "connection reset")
        assert output.startswith("WARNING:connection reset")

    def test_preserves_non_noisy_info_logs(self):
        output = self._emit("llm_router.requests", logging.INFO, "Important info message")
        assert output.startswith("INFO:Important info message")


@pytest.mark.unit
class TestNoisyHttpLoggerLevelSetter:
    def teardown_method(self):
        for name in NOISY_HTTP_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_sets_warning_by_default(self):
        set_noisy_http_logger_levels("INFO")
        for name in NOISY_HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_stays_debug_when_global_debug(self):
        set_noisy_http_logger_levels("DEBUG")
        for name in NOISY_HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG


@pytest.mark.unit
class TestCorrelation:
    def _record(self, msg: str = "hello") -> logging.LogRecord:
        return logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_formatter_adds_correlation_id(self):
        formatter = CorrelationFormatter("%(message)s")
        record = self._record()
        record.correlation_id = "1234567890"

        assert formatter.format(record).startswith("[12345678] hello")
        # The original record is left untouched
        assert record.msg == "hello"

    def test_formatter_without_correlation_id(self):
        assert CorrelationFormatter("%(message)s").format(self._record()) == "hello"

    def _capture(self) -> tuple[StringIO, logging.Handler]:
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(CorrelationIdFilter())
        handler.setFormatter(CorrelationFormatter("%(message)s"))
        return stream, handler

    def test_correlation_context_tags_records(self):
        stream, handler = self._capture()
        logger = ConversationLogger.get_logger()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        try:
            with ConversationLogger.correlation_context("abcdef0123456789"):
                logger.info("inside")
            logger.info("outside")
        finally:
            logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        lines = stream.getvalue().splitlines()
        assert lines == ["[abcdef01] inside", "outside"]

    def test_overlapping_requests_keep_their_own_id(self):
        stream, handler = self._capture()
        logger = ConversationLogger.get_logger()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        factory = logging.getLogRecordFactory()

        async def handle(request_id: str, delay: float) -> None:
            with ConversationLogger.correlation_context(request_id):
                logger.info(f"start {request_id}")
                await asyncio.sleep(delay)
                logger.info(f"end {request_id}")

        async def run_both() -> None:
            await asyncio.gather(handle("aaaaaaaa-1", 0.02), handle("bbbbbbbb-2", 0.01))

        try:
            asyncio.run(run_both())
            logger.info("after")
        finally:
            logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        lines = stream.getvalue().splitlines()
        assert sorted(lines[:4]) == [
            "[aaaaaaaa] end aaaaaaaa-1",
            "[aaaaaaaa] start aaaaaaaa-1",
            "[bbbbbbbb] end bbbbbbbb-2",
            "[bbbbbbbb] start bbbbbbbb-2",
        ]
        assert lines[4] == "after"
        assert ConversationLogger.current_correlation_id() is None
        assert logging.getLogRecordFactory() is factory


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("debug", "DEBUG"),
        ("WARNING  # quieter", "WARNING"),
        ("", "INFO"),
        (None, "INFO"),
        ("verbose", "INFO"),
    ],
)
def test_normalize_log_level(value, expected):
    assert normalize_log_level(value) == expected


@pytest.mark.unit
class TestConfigureRootLogging:
    def setup_method(self):
        root = logging.getLogger()
        self.saved_handlers = list(root.handlers)
        self.saved_level = root.level

    def teardown_method(self):
        # Avoid cross-test leakage since configure_root_logging mutates global logging.
        root = logging.getLogger()
        root.handlers[:] = self.saved_handlers
        root.setLevel(self.saved_level)
        for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
            logging.getLogger(logger_name).setLevel(logging.NOTSET)
        for name in NOISY_HTTP_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_installs_single_correlation_handler(self):
        configure_root_logging("INFO")
        configure_root_logging("INFO")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CorrelationFormatter)
        assert root.level == logging.INFO

    def test_returns_effective_level(self):
        assert configure_root_logging("debug") == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_quiets_uvicorn(self):
        configure_root_logging("INFO")
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_handler_tags_records_with_active_id(self):
        configure_root_logging("INFO")
        handler = logging.getLogger().handlers[0]
        record = logging.makeLogRecord({"msg": "hello"})

        with ConversationLogger.correlation_context("feedface99"):
            handler.filter(record)

        assert record.correlation_id == "feedface99"
