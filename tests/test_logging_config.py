import logging

from instant_transfer.logging_config import SERVICE_LOG_NAME, SETTLEMENT_LOG_NAME, get_logger, setup_logging


def _flush(name):
    for handler in logging.getLogger(name).handlers:
        handler.flush()


def test_settlement_messages_have_their_own_file(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    setup_logging()

    get_logger("instant_transfer.api.transfers").info("transfer accepted")
    get_logger("instant_transfer.settlement").info("transfer settled")
    _flush("instant_transfer")
    _flush("instant_transfer.settlement")

    service_log = (tmp_path / SERVICE_LOG_NAME).read_text(encoding="utf-8")
    settlement_log = (tmp_path / SETTLEMENT_LOG_NAME).read_text(encoding="utf-8")
    assert "transfer accepted" in service_log
    assert "transfer settled" not in service_log
    assert "transfer settled" in settlement_log


def test_setup_logging_twice_keeps_one_file_handler(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    setup_logging()
    setup_logging()

    handlers = logging.getLogger("instant_transfer").handlers
    assert len([h for h in handlers if isinstance(h, logging.FileHandler)]) == 1
