import json
import logging

from pythonjsonlogger import jsonlogger

import src.utils.logging as log_utils


def test_setup_logging_production_json(monkeypatch, tmp_path):
    monkeypatch.setattr(log_utils.settings, "ENVIRONMENT", "production", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_LEVEL", "INFO", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_DIR", str(tmp_path), raising=False)

    logger = log_utils.setup_logging("test_report_prod")

    assert any(isinstance(h.formatter, jsonlogger.JsonFormatter) for h in logger.handlers)
    assert len(logger.handlers) == 2
    assert any(p.name.startswith("test_report_prod_") for p in tmp_path.iterdir())


def test_setup_logging_dev_formatter(monkeypatch):
    monkeypatch.setattr(log_utils.settings, "ENVIRONMENT", "development", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_LEVEL", "DEBUG", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_DIR", "", raising=False)

    logger = log_utils.setup_logging("test_report_dev")

    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert logger.level == logging.DEBUG


def test_module_loggers_reach_root_handlers(monkeypatch):
    monkeypatch.setattr(log_utils.settings, "ENVIRONMENT", "development", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_DIR", "", raising=False)

    app_logger = log_utils.setup_logging("test_report_root")

    assert logging.getLogger().handlers == app_logger.handlers
    assert log_utils.get_logger("src.processing.engine").propagate


def test_get_logger_returns_named_logger():
    logger = log_utils.get_logger("src.processing.records")
    assert logger.name == "src.processing.records"


def test_production_records_carry_environment(monkeypatch):
    monkeypatch.setattr(log_utils.settings, "ENVIRONMENT", "production", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_DIR", "", raising=False)

    logger = log_utils.setup_logging("test_report_env")
    record = logging.LogRecord("src.processing.engine", logging.INFO, __file__, 1, "report ready", None, None)
    payload = json.loads(logger.handlers[0].formatter.format(record))

    assert payload["environment"] == "production"
    assert payload["message"] == "report ready"
    assert payload["name"] == "src.processing.engine"


def test_geo_library_loggers_held_at_warning(monkeypatch):
    monkeypatch.setattr(log_utils.settings, "ENVIRONMENT", "development", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_LEVEL", "DEBUG", raising=False)
    monkeypatch.setattr(log_utils.settings, "LOG_DIR", "", raising=False)

    log_utils.setup_logging("test_report_quiet")

    for name in ("fiona", "pyogrio", "shapely.geos"):
        assert logging.getLogger(name).level == logging.WARNING
    assert not logging.getLogger("pyogrio").isEnabledFor(logging.INFO)
    assert logging.getLogger("src.ingest.block_groups").isEnabledFor(logging.DEBUG)
