"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
테스트에서는 app.dependency_overrides로 인메모리 저장소 주입.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IEventSource
from core.capital.service import CapitalService
from core.config.loader import Settings, get_settings
from core.expenses.service import ExpenseService
from core.ledger.aggregator import BalanceAggregator
from core.storage.audit_store import AuditStore
from core.storage.capital_store import CapitalStore
from core.storage.event_source import SQLiteEventSource
from core.storage.expense_store import ExpenseStore


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_payment_markers() -> tuple[str, ...]:
    """원장 결제 중복 표식 (settings.yaml ledger.payment_markers)"""
    return get_settings().payment_markers


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    원장/잔액 조회는 읽기만 수행.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    자본 등록/삭제, 지출 등록 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 코어 서비스
# =========================================================================


def get_event_source(db: SQLiteAdapter = Depends(get_db)) -> IEventSource:
    """원장 이벤트 소스"""
    return SQLiteEventSource(db)


def get_capital_service(db: SQLiteAdapter = Depends(get_db_write)) -> CapitalService:
    """자본 변경 서비스 (감사 로그 포함)"""
    return CapitalService(CapitalStore(db), AuditStore(db))


def get_expense_service(db: SQLiteAdapter = Depends(get_db_write)) -> ExpenseService:
    """지출 서비스 (등록 직전 잔액을 같은 연결에서 계산)"""
    return ExpenseService(
        ExpenseStore(db),
        BalanceAggregator(SQLiteEventSource(db)),
        AuditStore(db),
    )


def get_expense_query_service(db: SQLiteAdapter = Depends(get_db)) -> ExpenseService:
    """조회 전용 지출 서비스 (읽기 전용 연결, 감사 로그 없음)"""
    return ExpenseService(ExpenseStore(db), BalanceAggregator(SQLiteEventSource(db)))
