import logging
from datetime import datetime
from pathlib import Path

from spiderhub.shared.handlers.logging_handler import DailyRotatingFileHandler
from spiderhub.shared.logging_config import build_logging_config


def test_handler_creates_dated_file(tmp_path):
    log_dir = tmp_path / "error"
    handler = DailyRotatingFileHandler(str(log_dir), "error.log", backup_count=3)
    try:
        today = datetime.now().strftime('%Y-%m-%d')
        assert log_dir.is_dir()
        assert Path(handler.baseFilename).name == f"{today}_error.log"
        assert handler.backupCount == 3
    finally:
        handler.close()


def test_namer_keeps_date_prefix_format(tmp_path):
    handler = DailyRotatingFileHandler(str(tmp_path), "error.log")
    try:
        rotated = handler.namer(str(tmp_path / "2025-11-30_error.log.2025-11-29"))
        assert Path(rotated).name == "2025-11-29_error.log"
        assert handler.namer("other.log.1") == "other.log.1"
    finally:
        handler.close()


def test_logging_config_wires_three_categories(tmp_path):
    config = build_logging_config(tmp_path, level="DEBUG")

    assert set(config['loggers']) >= {'domain.task_lifecycle', 'infrastructure.error', 'infrastructure.perf'}
    assert config['handlers']['error_file']['log_dir'] == str(tmp_path / "error")
    assert config['handlers']['console']['level'] == "DEBUG"
    assert config['formatters']['json']['()'] == 'pythonjsonlogger.jsonlogger.JsonFormatter'
