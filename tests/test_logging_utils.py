import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from studynote.config import Config
from studynote.logging_utils import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("studynote")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_handler_follows_logging_config(tmp_path):
    cfg = Config(base_dir=str(tmp_path))
    cfg.logging.filename = "notes.log"
    cfg.logging.max_bytes = 1024
    cfg.logging.backup_count = 1
    cfg.logging.level = "warning"

    logger, log_path = setup_logging(cfg)

    assert log_path == os.path.join(str(tmp_path), "Logs", "notes.log")
    assert logger.level == logging.WARNING
    handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(handlers) == 1
    assert handlers[0].maxBytes == 1024
    assert handlers[0].backupCount == 1


def test_debug_flag_wins_over_level():
    cfg = Config(debug_logging=True)
    cfg.logging.level = "ERROR"
    assert resolve_level(cfg) == logging.DEBUG


def test_unknown_level_falls_back_to_info():
    cfg = Config()
    cfg.logging.level = "chatty"
    assert resolve_level(cfg) == logging.INFO


def test_repeat_setup_keeps_one_handler(tmp_path):
    cfg = Config(base_dir=str(tmp_path))
    setup_logging(cfg)
    logger, _ = setup_logging(cfg)
    assert len(logger.handlers) == 1


def test_new_log_dir_replaces_handler(tmp_path):
    first = Config(base_dir=str(tmp_path / "a"))
    second = Config(base_dir=str(tmp_path / "b"))
    setup_logging(first)
    logger, log_path = setup_logging(second)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].baseFilename == os.path.abspath(log_path)
