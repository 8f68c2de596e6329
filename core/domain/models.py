"""
도메인 모델

초기 자본, 자본 변동, 주문 결제, 지출, 정비 비용 및 파생 Ledger 항목.
모든 금액은 Decimal 타입 사용.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from core.types import Channel, EntryKind, EntrySource, MovementKind

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """숫자/문자열을 Decimal로 변환 (float 오차 방지를 위해 str 경유)"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class ChannelAmounts:
    """결제 수단별 금액 (cash, wallet_a, wallet_b)

    초기 자본과 자본 변동은 세 수단에 나누어 기록됨.
    """

    cash: Decimal = ZERO
    wallet_a: Decimal = ZERO
    wallet_b: Decimal = ZERO

    @classmethod
    def zero(cls) -> "ChannelAmounts":
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[Any, Any]) -> "ChannelAmounts":
        """딕셔너리에서 생성

        키는 Channel 또는 문자열 모두 허용, 없는 수단은 0.
        """
        values: dict[str, Decimal] = {}
        for channel in Channel.ordered():
            raw = data.get(channel, data.get(channel.value, ZERO))
            values[channel.value] = to_decimal(raw if raw is not None else ZERO)
        return cls(**values)

    def get(self, channel: Channel | str) -> Decimal:
        """수단별 금액 조회"""
        return getattr(self, Channel(channel).value)

    def __getitem__(self, channel: Channel | str) -> Decimal:
        return self.get(channel)

    @property
    def total(self) -> Decimal:
        """세 수단 합계"""
        return self.cash + self.wallet_a + self.wallet_b

    def is_all_zero(self) -> bool:
        return all(self.get(c) == ZERO for c in Channel.ordered())

    def has_negative(self) -> bool:
        return any(self.get(c) < ZERO for c in Channel.ordered())

    def plus(self, other: "ChannelAmounts") -> "ChannelAmounts":
        return ChannelAmounts(
            cash=self.cash + other.cash,
            wallet_a=self.wallet_a + other.wallet_a,
            wallet_b=self.wallet_b + other.wallet_b,
        )

    def minus(self, other: "ChannelAmounts") -> "ChannelAmounts":
        return ChannelAmounts(
            cash=self.cash - other.cash,
            wallet_a=self.wallet_a - other.wallet_a,
            wallet_b=self.wallet_b - other.wallet_b,
        )

    def to_dict(self) -> dict[str, str]:
        """직렬화용 (Decimal → str)"""
        return {c.value: str(self.get(c)) for c in Channel.ordered()}


@dataclass(frozen=True)
class InitialCapital:
    """초기 자본 (시스템 전체에서 단 하나)"""

    id: str
    amounts: ChannelAmounts
    ts: datetime
    created_by: str
    created_at: datetime


@dataclass(frozen=True)
class CapitalMovement:
    """자본 변동 (투입/인출)

    생성 후 수정 불가. 관리자 삭제만 허용.
    """

    id: str
    kind: MovementKind
    amounts: ChannelAmounts
    concept: str
    ts: datetime
    created_by: str
    created_at: datetime
    notes: str | None = None

    @property
    def sign(self) -> int:
        """잔액 반영 부호 (투입 +1, 인출 -1)"""
        return 1 if self.kind == MovementKind.INJECTION else -1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "amounts": self.amounts.to_dict(),
            "concept": self.concept,
            "notes": self.notes,
            "ts": self.ts.isoformat(),
            "created_by": self.created_by,
        }


@dataclass(frozen=True)
class ExpenseConcept:
    """지출 항목 분류"""

    id: str
    name: str
    created_at: datetime
    description: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Expense:
    """일반 지출 (단일 수단, 단일 양수 금액)"""

    id: str
    concept_id: str
    concept_name: str
    amount: Decimal
    ts: datetime
    channel: Channel
    description: str
    created_by: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "concept_id": self.concept_id,
            "concept_name": self.concept_name,
            "amount": str(self.amount),
            "channel": self.channel.value,
            "description": self.description,
            "ts": self.ts.isoformat(),
            "created_by": self.created_by,
        }


@dataclass(frozen=True)
class MaintenanceExpense:
    """장비 정비 비용

    원장 반영 시점은 생성 시각 (완료 예정/완료 시각 아님).
    """

    id: str
    equipment_id: str
    cost: Decimal
    channel: Channel
    created_at: datetime
    failure_type: str = ""
    description: str = ""
    created_by: str = ""


@dataclass(frozen=True)
class OrderPayment:
    """주문 결제 내역 (주문/고객 컨텍스트 포함)"""

    order_id: str
    index: int
    amount: Decimal
    channel: Channel
    ts: datetime
    reference: str | None = None
    client_name: str | None = None
    plan_name: str | None = None

    @property
    def payment_id(self) -> str:
        return f"{self.order_id}:{self.index}"


@dataclass(frozen=True)
class Order:
    """주문 (결제 조회용 읽기 모델)"""

    id: str
    total: Decimal
    client_name: str = ""
    plan_name: str = ""
    payments: tuple[OrderPayment, ...] = ()

    @property
    def paid_total(self) -> Decimal:
        return sum((p.amount for p in self.payments), ZERO)

    @property
    def outstanding_balance(self) -> Decimal:
        """미수금 = max(0, 총액 - 결제 합계)"""
        return max(ZERO, self.total - self.paid_total)


@dataclass
class LedgerEntry:
    """Ledger 항목 (파생, 저장하지 않음)

    하나의 원천 이벤트를 단일 금액/단일 수단으로 정규화한 뷰.
    balance_* 필드는 정렬된 순서상 해당 시점의 누적 잔액.
    """

    entry_id: str
    kind: EntryKind
    ts: datetime
    time_of_day: str
    concept: str
    amount: Decimal
    channel: Channel
    source: EntrySource
    client: str | None = None
    plan: str | None = None
    reference: str | None = None

    balance_cash: Decimal = ZERO
    balance_wallet_a: Decimal = ZERO
    balance_wallet_b: Decimal = ZERO
    balance_total: Decimal = ZERO

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind == EntryKind.INCOME else -self.amount

    @property
    def balances(self) -> ChannelAmounts:
        return ChannelAmounts(
            cash=self.balance_cash,
            wallet_a=self.balance_wallet_a,
            wallet_b=self.balance_wallet_b,
        )

    def to_row(self) -> dict[str, Any]:
        """표시 계층(CSV/XLSX 등)에 넘길 평면 행"""
        return {
            "entry_id": self.entry_id,
            "kind": self.kind.value,
            "ts": self.ts.isoformat(),
            "time_of_day": self.time_of_day,
            "concept": self.concept,
            "amount": str(self.amount),
            "channel": self.channel.value,
            "source": self.source.value,
            "client": self.client,
            "plan": self.plan,
            "reference": self.reference,
            "balance_cash": str(self.balance_cash),
            "balance_wallet_a": str(self.balance_wallet_a),
            "balance_wallet_b": str(self.balance_wallet_b),
            "balance_total": str(self.balance_total),
        }


@dataclass(frozen=True)
class BalanceSnapshot:
    """현재 수단별 잔액

    degraded=True면 소스 조회 실패로 0 잔액을 반환한 것.
    """

    amounts: ChannelAmounts = field(default_factory=ChannelAmounts)
    degraded: bool = False
    warning: str | None = None

    @property
    def cash(self) -> Decimal:
        return self.amounts.cash

    @property
    def wallet_a(self) -> Decimal:
        return self.amounts.wallet_a

    @property
    def wallet_b(self) -> Decimal:
        return self.amounts.wallet_b

    @property
    def total(self) -> Decimal:
        return self.amounts.total

    def __getitem__(self, channel: Channel | str) -> Decimal:
        return self.amounts.get(channel)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.amounts.to_dict(),
            "total": str(self.total),
            "degraded": self.degraded,
            "warning": self.warning,
        }
