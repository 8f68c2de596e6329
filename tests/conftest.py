"""
pytest 공통 fixture 정의

설정 파일, 인메모리 저장소, 임시 SQLite DB
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.mock.ledger_repository import InMemoryLedgerRepository
from core.config.loader import Settings


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    content = """# 테스트용 settings.yaml
mode: demo

ledger:
  payment_markers:
    - pedido
    - servicio
    - abono
    - liquidación

web:
  host: 0.0.0.0
  port: 9000
"""
    path = temp_dir / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, ledger 섹션 없음)"""
    path = temp_dir / "settings_prod.yaml"
    path.write_text("mode: production\n", encoding="utf-8")
    return path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    path = temp_dir / "settings_invalid.yaml"
    path.write_text("mode: invalid_mode\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """각 테스트 전후 Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def repo() -> InMemoryLedgerRepository:
    """인메모리 원장 저장소"""
    return InMemoryLedgerRepository()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 SQLite DB"""
    adapter = SQLiteAdapter(tmp_path / "ledger_test.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()
