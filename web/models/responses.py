"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 Decimal 정밀도 유지를 위해 문자열로 반환.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.domain.models import (
    BalanceSnapshot,
    CapitalMovement,
    Expense,
    ExpenseConcept,
    InitialCapital,
    LedgerEntry,
)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="운영 모드 (production/demo)")
    version: str = Field(..., description="버전")


class BalancesResponse(BaseModel):
    """현재 수단별 잔액"""

    cash: str
    wallet_a: str
    wallet_b: str
    total: str
    degraded: bool = Field(default=False, description="소스 조회 실패로 0 잔액 반환 여부")
    warning: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot: BalanceSnapshot) -> "BalancesResponse":
        return cls(**snapshot.to_dict())


class InitialCapitalResponse(BaseModel):
    """초기 자본 응답"""

    id: str
    amounts: dict[str, str]
    total: str
    ts: str
    created_by: str

    @classmethod
    def from_record(cls, record: InitialCapital) -> "InitialCapitalResponse":
        return cls(
            id=record.id,
            amounts=record.amounts.to_dict(),
            total=str(record.amounts.total),
            ts=record.ts.isoformat(),
            created_by=record.created_by,
        )


class CapitalMovementResponse(BaseModel):
    """자본 변동 응답"""

    id: str
    kind: str
    amounts: dict[str, str]
    concept: str
    notes: str | None
    ts: str
    created_by: str

    @classmethod
    def from_record(cls, record: CapitalMovement) -> "CapitalMovementResponse":
        return cls(**record.to_dict())


class LedgerEntryResponse(BaseModel):
    """원장 항목 응답"""

    entry_id: str
    kind: str
    ts: str
    time_of_day: str
    concept: str
    amount: str
    channel: str
    source: str
    client: str | None = None
    plan: str | None = None
    reference: str | None = None
    balance_cash: str
    balance_wallet_a: str
    balance_wallet_b: str
    balance_total: str

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(**entry.to_row())


class LedgerResponse(BaseModel):
    """기간 원장 응답"""

    start: str
    end: str
    entries: list[LedgerEntryResponse]
    summary: dict[str, Any]


class ChannelMovementResponse(BaseModel):
    """수단 변동 응답"""

    movement_id: str
    channel: str
    kind: str
    amount: str
    ts: str
    concept: str
    source: str


class ChannelHistoryResponse(BaseModel):
    """수단별 이력 응답"""

    channel: str
    movements: list[ChannelMovementResponse]
    balance: str


class SolvencyCheckResponse(BaseModel):
    """지급 가능 여부 응답"""

    channel: str
    amount: str
    balance: str
    admissible: bool
    degraded: bool = False


class AdmissibleChannelsResponse(BaseModel):
    """지급 가능 수단 응답"""

    amount: str
    channels: list[str]
    degraded: bool = False


class ExpenseResponse(BaseModel):
    """지출 응답"""

    id: str
    concept_id: str
    concept_name: str
    amount: str
    channel: str
    ts: str
    description: str
    created_by: str

    @classmethod
    def from_record(cls, record: Expense) -> "ExpenseResponse":
        return cls(**record.to_dict())


class ExpenseConceptResponse(BaseModel):
    """지출 항목 응답"""

    id: str
    name: str
    description: str | None
    is_active: bool

    @classmethod
    def from_record(cls, record: ExpenseConcept) -> "ExpenseConceptResponse":
        return cls(
            id=record.id,
            name=record.name,
            description=record.description,
            is_active=record.is_active,
        )
