"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
작성자(author)는 세션이 아닌 요청 필드로 명시.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from core.domain.models import ChannelAmounts
from core.types import Channel, MovementKind


class ChannelAmountsRequest(BaseModel):
    """수단별 금액 (없는 수단은 0)"""

    cash: Decimal = Field(default=Decimal("0"), description="현금")
    wallet_a: Decimal = Field(default=Decimal("0"), description="모바일 지갑 A")
    wallet_b: Decimal = Field(default=Decimal("0"), description="모바일 지갑 B")

    def to_amounts(self) -> ChannelAmounts:
        return ChannelAmounts(cash=self.cash, wallet_a=self.wallet_a, wallet_b=self.wallet_b)


class InitialCapitalRequest(ChannelAmountsRequest):
    """초기 자본 등록 요청"""

    ts: datetime | None = Field(default=None, description="기준 시각 (없으면 현재)")
    author: str = Field(..., min_length=1, description="작성자 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"cash": "100000", "wallet_a": "0", "wallet_b": "0", "author": "admin"},
            ]
        }
    }


class CapitalMovementRequest(ChannelAmountsRequest):
    """자본 투입/인출 요청"""

    kind: MovementKind = Field(..., description="injection 또는 withdrawal")
    concept: str = Field(..., description="사유")
    notes: str | None = Field(default=None, description="메모")
    ts: datetime | None = Field(default=None, description="발생 시각 (없으면 현재)")
    author: str = Field(..., min_length=1, description="작성자 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "kind": "injection",
                    "wallet_a": "50000",
                    "concept": "loan",
                    "author": "admin",
                },
            ]
        }
    }


class ExpenseRequest(BaseModel):
    """지출 등록 요청"""

    concept_id: str = Field(..., description="지출 항목 ID")
    amount: Decimal = Field(..., description="금액 (양수)")
    channel: Channel = Field(..., description="결제 수단")
    ts: datetime | None = Field(default=None, description="지출 시각 (없으면 현재)")
    description: str = Field(default="", description="설명")
    author: str = Field(..., min_length=1, description="작성자 ID")


class ExpenseConceptRequest(BaseModel):
    """지출 항목 생성/수정 요청"""

    name: str = Field(..., description="항목 이름")
    description: str | None = Field(default=None, description="설명")
