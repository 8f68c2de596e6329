"""
지급 가능 여부 API 라우트

지출 입력 화면에서 수단 선택 전 잔액 확인용.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from adapters.interfaces import IEventSource
from core.domain.exceptions import LedgerError
from core.ledger.aggregator import BalanceAggregator
from core.ledger.solvency import admissible_channels, is_admissible
from core.types import Channel
from web.dependencies import get_event_source
from web.errors import to_http_exception
from web.models.responses import AdmissibleChannelsResponse, SolvencyCheckResponse

router = APIRouter(prefix="/api/solvency", tags=["Solvency"])


@router.get("/check", response_model=SolvencyCheckResponse)
async def check_solvency(
    amount: Decimal = Query(..., description="지출 예정 금액 (양수)"),
    channel: Channel = Query(..., description="결제 수단"),
    source: IEventSource = Depends(get_event_source),
) -> SolvencyCheckResponse:
    """선택한 수단 잔액 >= 금액 여부"""
    balances = await BalanceAggregator(source).current_balances()
    try:
        admissible = is_admissible(balances, amount, channel)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return SolvencyCheckResponse(
        channel=channel.value,
        amount=str(amount),
        balance=str(balances[channel]),
        admissible=admissible,
        degraded=balances.degraded,
    )


@router.get("/channels", response_model=AdmissibleChannelsResponse)
async def get_admissible_channels(
    amount: Decimal = Query(..., description="지출 예정 금액 (양수)"),
    source: IEventSource = Depends(get_event_source),
) -> AdmissibleChannelsResponse:
    """금액을 감당할 수 있는 수단 목록 (cash, wallet_a, wallet_b 순)"""
    balances = await BalanceAggregator(source).current_balances()
    try:
        channels = admissible_channels(balances, amount)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return AdmissibleChannelsResponse(
        amount=str(amount),
        channels=[c.value for c in channels],
        degraded=balances.degraded,
    )
