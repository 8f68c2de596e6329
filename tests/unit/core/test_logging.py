"""
core/logging.py 테스트
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.constants import Paths
from core.logging import NOISY_LOGGERS, get_log_file_path, setup_logging


@pytest.fixture
def restore_root_logger():
    """루트 로거 핸들러/레벨 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGetLogFilePath:
    """get_log_file_path 테스트"""

    def test_web(self) -> None:
        assert get_log_file_path("web") == Paths.WEB_LOGS_DIR / "web.log"

    def test_other_process(self) -> None:
        assert get_log_file_path("seed") == Paths.LOGS_DIR / "seed.log"


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_handlers_and_noisy_loggers(
        self,
        tmp_path: Path,
        restore_root_logger: None,
    ) -> None:
        log_file = tmp_path / "logs" / "web.log"

        root = setup_logging("web", log_file=log_file)

        assert log_file.parent.exists()
        assert len(root.handlers) == 2
        assert any(isinstance(h, TimedRotatingFileHandler) for h in root.handlers)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_writes_to_file(self, tmp_path: Path, restore_root_logger: None) -> None:
        log_file = tmp_path / "web.log"
        setup_logging("web", log_file=log_file)

        logging.getLogger("core.ledger.aggregator").warning("잔액 집계 실패")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "WARNING" in content
        assert "core.ledger.aggregator" in content
