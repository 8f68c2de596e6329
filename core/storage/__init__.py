"""
스토리지 모듈

자본, 주문 결제, 지출, 감사 로그 저장소 및 원장 이벤트 소스 제공
"""

from core.storage.capital_store import CapitalStore
from core.storage.order_store import OrderStore
from core.storage.expense_store import ExpenseStore
from core.storage.audit_store import AuditStore
from core.storage.event_source import SQLiteEventSource

__all__ = [
    "CapitalStore",
    "OrderStore",
    "ExpenseStore",
    "AuditStore",
    "SQLiteEventSource",
]
