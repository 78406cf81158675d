import logging

import pytest

from src.utils.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in root.handlers:
        h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_routes_by_prefix(tmp_path, restore_root_logger):
    log_dir = setup_logging(tmp_path / "logs")
    logging.getLogger("src.feed.ntfy_client").info("feed line")
    logging.getLogger("src.overlay.coordinator").info("overlay line")
    logging.getLogger("src.overlay.coordinator").error("overlay error")
    for h in restore_root_logger.handlers:
        h.flush()

    feed = (log_dir / "feed.log").read_text(encoding="utf-8")
    overlay = (log_dir / "overlay.log").read_text(encoding="utf-8")
    errors = (log_dir / "error.log").read_text(encoding="utf-8")
    app = (log_dir / "app.log").read_text(encoding="utf-8")

    assert "feed line" in feed and "overlay line" not in feed
    assert "overlay line" in overlay and "feed line" not in overlay
    assert "overlay error" in errors and "feed line" not in errors
    assert "feed line" in app and "overlay line" in app


def test_noisy_loggers_capped(tmp_path, restore_root_logger, monkeypatch):
    monkeypatch.setenv("HTTPX_LOG_LEVEL", "ERROR")
    setup_logging(tmp_path / "logs")
    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("uvicorn.access").level == logging.ERROR
