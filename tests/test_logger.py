import logging

from batch_csr.core import logger as logger_module
from batch_csr.core.logger import LOG_FILE_NAME, setup_logger


def test_logger_writes_to_console_and_rotating_file(monkeypatch, tmp_path):
    monkeypatch.setattr(logger_module, "LOG_DIR", str(tmp_path / "logs"))

    log = setup_logger("csrbatch.test.rotating", level="DEBUG")
    log.debug("generated YDL0001")
    for handler in log.handlers:
        handler.flush()

    assert log.level == logging.DEBUG
    assert len(log.handlers) == 2
    assert "generated YDL0001" in (tmp_path / "logs" / LOG_FILE_NAME).read_text()


def test_logger_setup_is_idempotent(monkeypatch, tmp_path):
    monkeypatch.setattr(logger_module, "LOG_DIR", str(tmp_path))

    first = setup_logger("csrbatch.test.idempotent")
    second = setup_logger("csrbatch.test.idempotent")

    assert first is second
    assert len(second.handlers) == 2
