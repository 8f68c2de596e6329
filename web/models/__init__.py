"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    CapitalMovementRequest,
    ChannelAmountsRequest,
    ExpenseConceptRequest,
    ExpenseRequest,
    InitialCapitalRequest,
)
from web.models.responses import (
    AdmissibleChannelsResponse,
    BalancesResponse,
    CapitalMovementResponse,
    ChannelHistoryResponse,
    ChannelMovementResponse,
    ExpenseConceptResponse,
    ExpenseResponse,
    HealthResponse,
    InitialCapitalResponse,
    LedgerEntryResponse,
    LedgerResponse,
    SolvencyCheckResponse,
)

__all__ = [
    # Requests
    "ChannelAmountsRequest",
    "InitialCapitalRequest",
    "CapitalMovementRequest",
    "ExpenseRequest",
    "ExpenseConceptRequest",
    # Responses
    "HealthResponse",
    "BalancesResponse",
    "InitialCapitalResponse",
    "CapitalMovementResponse",
    "LedgerEntryResponse",
    "LedgerResponse",
    "ChannelMovementResponse",
    "ChannelHistoryResponse",
    "SolvencyCheckResponse",
    "AdmissibleChannelsResponse",
    "ExpenseResponse",
    "ExpenseConceptResponse",
]
