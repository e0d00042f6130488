import logging

import pytest

from wealth_engine.utils.logger import (
    LOG_DIR_ENV,
    ColoredFormatter,
    get_logger,
    log_performance,
    set_console_level,
    setup_logger,
)


def _console(logger):
    return next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))


def test_console_only_by_default(monkeypatch):
    monkeypatch.delenv(LOG_DIR_ENV, raising=False)
    logger = get_logger("wealth_engine.tests.console_only")
    assert len(logger.handlers) == 1
    assert _console(logger).level == logging.WARNING


def test_log_dir_adds_file_handler(monkeypatch, tmp_path):
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "logs"))
    logger = get_logger("wealth_engine.tests.to_file")
    logger.debug("drift computed")
    for handler in logger.handlers:
        handler.flush()

    files = list((tmp_path / "logs").glob("wealth_engine_tests_to_file_*.log"))
    assert len(files) == 1
    text = files[0].read_text(encoding="utf-8")
    assert "drift computed" in text
    assert "\033[" not in text
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_setup_twice_does_not_stack_handlers():
    setup_logger("wealth_engine.tests.twice")
    logger = setup_logger("wealth_engine.tests.twice")
    assert len(logger.handlers) == 1


def test_set_console_level_only_touches_engine_loggers():
    engine = setup_logger("wealth_engine.tests.level")
    other = setup_logger("somebody_else.level")
    set_console_level(logging.DEBUG)
    assert _console(engine).level == logging.DEBUG
    assert _console(other).level == logging.WARNING
    set_console_level(logging.WARNING)


def test_colored_formatter_leaves_record_untouched():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
    line = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)
    assert line.startswith("\033[33mWARNING")
    assert record.levelname == "WARNING"


class TestLogPerformance:
    def test_success_logged(self, caplog):
        logger = logging.getLogger("wealth_engine.tests.timed")

        @log_performance(logger)
        def analyse():
            return 42

        with caplog.at_level(logging.INFO, logger="wealth_engine.tests.timed"):
            assert analyse() == 42
        assert "analyse finished in" in caplog.text

    def test_failure_logged_and_raised(self, caplog):
        logger = logging.getLogger("wealth_engine.tests.timed")

        @log_performance(logger)
        def analyse():
            raise ValueError("bad snapshot")

        with caplog.at_level(logging.ERROR, logger="wealth_engine.tests.timed"):
            with pytest.raises(ValueError):
                analyse()
        assert "analyse failed" in caplog.text
        assert "bad snapshot" in caplog.text
