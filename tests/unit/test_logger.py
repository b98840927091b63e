"""
Unit tests for structured logging.
"""

import json

import pytest

from retail_import.observability.logger import (
    ROOT_LOGGER_NAME,
    get_logger,
    log_operation,
    setup_logger,
)


@pytest.fixture
def json_logging(capsys, clean_env):
    """
    Factory configuring the package logger for JSON at INFO.

    Call it inside the test body so the handler writes to the captured
    stdout of the test; it returns a reader of the emitted JSON lines.
    """
    def _configure():
        setup_logger(ROOT_LOGGER_NAME, level="INFO", format_type="json")

        def _read():
            out = capsys.readouterr().out
            return [json.loads(line) for line in out.splitlines() if line.strip()]

        return _read

    yield _configure
    setup_logger(ROOT_LOGGER_NAME, level="WARNING", format_type="text")


@pytest.mark.unit
class TestLogger:
    """Tests for setup_logger and get_logger"""

    def test_module_logger_uses_package_handler(self, json_logging):
        read = json_logging()

        get_logger("retail_import.batch.pipeline").info("Staged 3 rows", extra={"row_count": 3})

        [entry] = read()
        assert entry["message"] == "Staged 3 rows"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "retail_import.batch.pipeline"
        assert entry["row_count"] == 3

    def test_json_lines_carry_timestamp(self, json_logging):
        read = json_logging()

        get_logger("retail_import.core").info("hi")

        [entry] = read()
        assert entry["timestamp"]
        assert entry["timestamp"][:4].isdigit()

    def test_level_filters(self, json_logging):
        read = json_logging()

        get_logger("retail_import.core").debug("hidden")

        assert read() == []

    def test_unknown_level_falls_back_to_info(self, clean_env):
        logger = setup_logger("retail_import_test_level", level="LOUD")

        assert logger.level == 20

    def test_level_from_environment(self, clean_env):
        clean_env["LOG_LEVEL"] = "ERROR"

        logger = setup_logger("retail_import_test_env")

        assert logger.level == 40


@pytest.mark.unit
class TestLogOperation:
    """Tests for the log_operation context manager"""

    def test_success_logs_start_and_completion(self, json_logging):
        read = json_logging()

        with log_operation("Retail sales import", csv_path="sales.csv"):
            pass

        start, done = read()
        assert start["message"] == "Starting: Retail sales import"
        assert done["status"] == "success"
        assert done["csv_path"] == "sales.csv"
        assert "duration_seconds" in done

    def test_failure_logged_and_reraised(self, json_logging):
        read = json_logging()

        with pytest.raises(ValueError):
            with log_operation("Retail sales import"):
                raise ValueError("boom")

        _, failed = read()
        assert failed["level"] == "ERROR"
        assert failed["error_type"] == "ValueError"
        assert failed["error_message"] == "boom"
