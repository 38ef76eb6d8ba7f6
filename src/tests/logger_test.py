import logging

from src.utils.logger import DotMsFormatter, setup_logger


def test_file_and_console_handlers(tmp_path):
    log_path = tmp_path / "logs" / "svc.log"
    logger = setup_logger("ccxt_rpc_test.file", log_path, level=logging.DEBUG)
    logger.debug("hello from test")
    for h in logger.handlers:
        h.flush()

    assert log_path.exists()
    text = log_path.read_text(encoding="utf-8")
    assert "DEBUG ccxt_rpc_test.file: hello from test" in text


def test_console_only_without_path():
    logger = setup_logger("ccxt_rpc_test.console")
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_repeat_setup_does_not_stack_handlers(tmp_path):
    for _ in range(3):
        logger = setup_logger("ccxt_rpc_test.repeat", tmp_path / "r.log", level="INFO")
    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO


def test_millisecond_timestamps():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
    record.created = 1700000000.123
    record.msecs = 123.0
    stamp = DotMsFormatter().formatTime(record)
    assert stamp.endswith(".123")
