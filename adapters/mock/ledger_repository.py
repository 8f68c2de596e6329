"""
Mock 원장 저장소

테스트용 인메모리 저장소.
IEventSource, ICapitalRepository, IExpenseRepository, IAuditStore Protocol 준수.
"""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.domain.exceptions import AlreadyExists
from core.domain.models import (
    CapitalMovement,
    Expense,
    ExpenseConcept,
    InitialCapital,
    MaintenanceExpense,
    Order,
    OrderPayment,
    to_decimal,
)
from core.types import Channel
from core.utils.timezone import ensure_utc, now_utc


@dataclass
class AuditRecord:
    """감사 로그 기록"""

    action: str
    entity_kind: str
    entity_id: str
    description: str
    actor_id: str
    before: dict[str, Any] | None
    after: dict[str, Any] | None
    ts: datetime = field(default_factory=now_utc)


def _in_range(ts: datetime, start: datetime | None, end: datetime | None) -> bool:
    ts = ensure_utc(ts)
    if start is not None and ts < ensure_utc(start):
        return False
    if end is not None and ts > ensure_utc(end):
        return False
    return True


class InMemoryLedgerRepository:
    """인메모리 원장 저장소

    모든 데이터를 메모리에 보관하며 호출 횟수를 기록.

    사용 예시:
    ```python
    repo = InMemoryLedgerRepository()
    repo.add_payment("order-1", Decimal("50000"), Channel.CASH, ts)

    builder = LedgerBuilder(repo)
    entries = await builder.build(start, end)
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 조회 실패 (SourceUnavailable 시나리오 테스트용)
        """
        self.should_fail = should_fail
        self.fail_methods: set[str] = set()

        self.initial_capital: InitialCapital | None = None
        self.movements: dict[str, CapitalMovement] = {}
        self.orders: dict[str, Order] = {}
        self.expenses: list[Expense] = []
        self.maintenance: list[MaintenanceExpense] = []
        self.concepts: dict[str, ExpenseConcept] = {}
        self.audit_log: list[AuditRecord] = []

        self.call_counts: dict[str, int] = {}
        self._singleton_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # 테스트 헬퍼
    # -------------------------------------------------------------------------

    def _check(self, method: str) -> None:
        self.call_counts[method] = self.call_counts.get(method, 0) + 1
        if self.should_fail or method in self.fail_methods:
            raise ConnectionError(f"Mock source failure: {method}")

    def add_order(
        self,
        order_id: str,
        total: Decimal | str | int = 0,
        client_name: str = "",
        plan_name: str = "",
    ) -> Order:
        """주문 등록 (결제 없음)"""
        order = Order(
            id=order_id,
            total=to_decimal(total),
            client_name=client_name,
            plan_name=plan_name,
        )
        self.orders[order_id] = order
        return order

    def add_payment(
        self,
        order_id: str,
        amount: Decimal | str | int,
        channel: Channel | str,
        ts: datetime,
        reference: str | None = None,
    ) -> OrderPayment:
        """주문 결제 추가 (주문이 없으면 자동 생성)"""
        order = self.orders.get(order_id) or self.add_order(order_id)
        payment = OrderPayment(
            order_id=order_id,
            index=len(order.payments),
            amount=to_decimal(amount),
            channel=Channel(channel),
            ts=ts,
            reference=reference,
            client_name=order.client_name or None,
            plan_name=order.plan_name or None,
        )
        self.orders[order_id] = Order(
            id=order.id,
            total=order.total,
            client_name=order.client_name,
            plan_name=order.plan_name,
            payments=order.payments + (payment,),
        )
        return payment

    def add_maintenance(
        self,
        maintenance_id: str,
        cost: Decimal | str | int,
        created_at: datetime,
        channel: Channel | str = Channel.CASH,
        equipment_id: str = "washer-1",
        failure_type: str = "",
        description: str = "",
    ) -> MaintenanceExpense:
        """정비 비용 추가"""
        record = MaintenanceExpense(
            id=maintenance_id,
            equipment_id=equipment_id,
            cost=to_decimal(cost),
            channel=Channel(channel),
            created_at=created_at,
            failure_type=failure_type,
            description=description,
        )
        self.maintenance.append(record)
        return record

    def clear(self) -> None:
        """모든 데이터 초기화"""
        self.initial_capital = None
        self.movements.clear()
        self.orders.clear()
        self.expenses.clear()
        self.maintenance.clear()
        self.concepts.clear()
        self.audit_log.clear()
        self.call_counts.clear()

    # -------------------------------------------------------------------------
    # IEventSource
    # -------------------------------------------------------------------------

    async def fetch_initial_capital(self) -> InitialCapital | None:
        self._check("fetch_initial_capital")
        return self.initial_capital

    async def fetch_all_movements(self) -> list[CapitalMovement]:
        self._check("fetch_all_movements")
        return sorted(self.movements.values(), key=lambda m: (ensure_utc(m.ts), m.id))

    async def fetch_payments_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[OrderPayment]:
        self._check("fetch_payments_in_range")
        return [
            payment
            for order in self.orders.values()
            for payment in order.payments
            if _in_range(payment.ts, start, end)
        ]

    async def fetch_expenses_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Expense]:
        self._check("fetch_expenses_in_range")
        return [e for e in self.expenses if _in_range(e.ts, start, end)]

    async def fetch_maintenance_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[MaintenanceExpense]:
        self._check("fetch_maintenance_in_range")
        return [m for m in self.maintenance if _in_range(m.created_at, start, end)]

    # -------------------------------------------------------------------------
    # ICapitalRepository
    # -------------------------------------------------------------------------

    async def insert_initial_capital(self, record: InitialCapital) -> None:
        self._check("insert_initial_capital")
        async with self._singleton_lock:
            if self.initial_capital is not None:
                raise AlreadyExists(
                    "초기 자본이 이미 등록되어 있습니다",
                    {"capital_id": record.id},
                )
            # 경합 재현을 위한 양보 지점
            await asyncio.sleep(0)
            self.initial_capital = record

    async def insert_movement(self, record: CapitalMovement) -> None:
        self._check("insert_movement")
        self.movements[record.id] = record

    async def get_movement(self, movement_id: str) -> CapitalMovement | None:
        self._check("get_movement")
        return self.movements.get(movement_id)

    async def delete_movement(self, movement_id: str) -> bool:
        self._check("delete_movement")
        return self.movements.pop(movement_id, None) is not None

    # -------------------------------------------------------------------------
    # IExpenseRepository
    # -------------------------------------------------------------------------

    async def insert_expense(self, record: Expense) -> None:
        self._check("insert_expense")
        self.expenses.append(record)

    async def get_expense(self, expense_id: str) -> Expense | None:
        self._check("get_expense")
        return next((e for e in self.expenses if e.id == expense_id), None)

    async def delete_expense(self, expense_id: str) -> bool:
        self._check("delete_expense")
        remaining = [e for e in self.expenses if e.id != expense_id]
        deleted = len(remaining) < len(self.expenses)
        self.expenses = remaining
        return deleted

    async def get_concept(self, concept_id: str) -> ExpenseConcept | None:
        self._check("get_concept")
        return self.concepts.get(concept_id)

    async def insert_concept(self, record: ExpenseConcept) -> None:
        self._check("insert_concept")
        self.concepts[record.id] = record

    async def update_concept(
        self,
        concept_id: str,
        name: str,
        description: str | None,
    ) -> bool:
        self._check("update_concept")
        concept = self.concepts.get(concept_id)
        if concept is None or not concept.is_active:
            return False
        self.concepts[concept_id] = replace(concept, name=name, description=description)
        return True

    async def list_active_concepts(self) -> list[ExpenseConcept]:
        self._check("list_active_concepts")
        return sorted(
            (c for c in self.concepts.values() if c.is_active),
            key=lambda c: c.name,
        )

    async def deactivate_concept(self, concept_id: str) -> bool:
        self._check("deactivate_concept")
        concept = self.concepts.get(concept_id)
        if concept is None or not concept.is_active:
            return False
        self.concepts[concept_id] = ExpenseConcept(
            id=concept.id,
            name=concept.name,
            created_at=concept.created_at,
            description=concept.description,
            is_active=False,
        )
        return True

    # -------------------------------------------------------------------------
    # IAuditStore
    # -------------------------------------------------------------------------

    async def log(
        self,
        action: str,
        entity_kind: str,
        entity_id: str,
        description: str,
        actor_id: str,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> None:
        self._check("log")
        self.audit_log.append(
            AuditRecord(
                action=action,
                entity_kind=entity_kind,
                entity_id=entity_id,
                description=description,
                actor_id=actor_id,
                before=before,
                after=after,
            )
        )
