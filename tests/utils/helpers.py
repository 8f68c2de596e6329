"""
테스트 헬퍼 함수

테스트에서 공통으로 사용되는 시각/레코드 생성 유틸리티.
"""

from datetime import datetime, timezone
from decimal import Decimal

from core.domain.models import (
    CapitalMovement,
    ChannelAmounts,
    Expense,
    ExpenseConcept,
    InitialCapital,
)
from core.types import Channel, MovementKind
from core.utils.timezone import COT


def cot(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """COT 벽시계 시각 → UTC datetime"""
    return datetime(year, month, day, hour, minute, tzinfo=COT).astimezone(timezone.utc)


def amounts(cash: int | str = 0, wallet_a: int | str = 0, wallet_b: int | str = 0) -> ChannelAmounts:
    return ChannelAmounts(
        cash=Decimal(str(cash)),
        wallet_a=Decimal(str(wallet_a)),
        wallet_b=Decimal(str(wallet_b)),
    )


def make_initial_capital(
    cash: int = 0,
    wallet_a: int = 0,
    wallet_b: int = 0,
    ts: datetime | None = None,
    capital_id: str = "cap-1",
) -> InitialCapital:
    ts = ts or cot(2026, 1, 1, 8)
    return InitialCapital(
        id=capital_id,
        amounts=amounts(cash, wallet_a, wallet_b),
        ts=ts,
        created_by="user:admin",
        created_at=ts,
    )


def make_movement(
    movement_id: str,
    kind: MovementKind,
    ts: datetime,
    cash: int = 0,
    wallet_a: int = 0,
    wallet_b: int = 0,
    concept: str = "loan",
    notes: str | None = None,
) -> CapitalMovement:
    return CapitalMovement(
        id=movement_id,
        kind=kind,
        amounts=amounts(cash, wallet_a, wallet_b),
        concept=concept,
        ts=ts,
        created_by="user:admin",
        created_at=ts,
        notes=notes,
    )


def make_concept(concept_id: str = "c-supplies", name: str = "Supplies") -> ExpenseConcept:
    return ExpenseConcept(id=concept_id, name=name, created_at=cot(2026, 1, 1, 8))


def make_expense(
    expense_id: str,
    amount: int,
    ts: datetime,
    channel: Channel = Channel.CASH,
    concept: ExpenseConcept | None = None,
) -> Expense:
    concept = concept or make_concept()
    return Expense(
        id=expense_id,
        concept_id=concept.id,
        concept_name=concept.name,
        amount=Decimal(amount),
        ts=ts,
        channel=channel,
        description="",
        created_by="user:admin",
        created_at=ts,
    )
