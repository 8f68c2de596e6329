"""
SQLiteEventSource - 원장 이벤트 소스

CapitalStore / OrderStore / ExpenseStore를 묶어 IEventSource Protocol 구현.
LedgerBuilder, BalanceAggregator, ChannelHistory가 사용.
"""

from datetime import datetime

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import (
    CapitalMovement,
    Expense,
    InitialCapital,
    MaintenanceExpense,
    OrderPayment,
)
from core.storage.capital_store import CapitalStore
from core.storage.expense_store import ExpenseStore
from core.storage.order_store import OrderStore


class SQLiteEventSource:
    """SQLite 기반 이벤트 소스"""

    def __init__(self, db: SQLiteAdapter):
        self.capital = CapitalStore(db)
        self.orders = OrderStore(db)
        self.expenses = ExpenseStore(db)

    async def fetch_initial_capital(self) -> InitialCapital | None:
        return await self.capital.fetch_initial_capital()

    async def fetch_all_movements(self) -> list[CapitalMovement]:
        return await self.capital.fetch_all_movements()

    async def fetch_payments_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[OrderPayment]:
        return await self.orders.fetch_payments_in_range(start, end)

    async def fetch_expenses_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Expense]:
        return await self.expenses.fetch_expenses_in_range(start, end)

    async def fetch_maintenance_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[MaintenanceExpense]:
        return await self.expenses.fetch_maintenance_in_range(start, end)
