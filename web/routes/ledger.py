"""
원장 API 라우트

기간 원장 (누적 잔액 포함) 및 결제 수단별 이력.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from adapters.interfaces import IEventSource
from core.domain.exceptions import LedgerError
from core.ledger.builder import LedgerBuilder
from core.ledger.history import ChannelHistory
from core.types import Channel
from core.utils.timezone import day_bounds, now_utc
from web.dependencies import get_event_source, get_payment_markers
from web.errors import to_http_exception
from web.models.responses import (
    ChannelHistoryResponse,
    ChannelMovementResponse,
    LedgerEntryResponse,
    LedgerResponse,
)

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("", response_model=LedgerResponse)
async def get_ledger(
    start: date = Query(..., description="시작일 (YYYY-MM-DD, COT)"),
    end: date = Query(..., description="종료일 (YYYY-MM-DD, COT, 포함)"),
    source: IEventSource = Depends(get_event_source),
    markers: tuple[str, ...] = Depends(get_payment_markers),
) -> LedgerResponse:
    """기간 원장

    초기 자본과 자본 변동은 기간과 무관하게 포함.
    """
    if start > end:
        raise HTTPException(
            status_code=422,
            detail=f"start must not be after end: {start} > {end}",
        )

    builder = LedgerBuilder(source, payment_markers=markers)
    try:
        entries = await builder.build(start, end)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return LedgerResponse(
        start=start.isoformat(),
        end=end.isoformat(),
        entries=[LedgerEntryResponse.from_entry(e) for e in entries],
        summary=LedgerBuilder.summarize(entries).to_dict(),
    )


@router.get("/channels/{channel}", response_model=ChannelHistoryResponse)
async def get_channel_history(
    channel: Channel = Path(..., description="결제 수단"),
    start: date | None = Query(default=None, description="시작일 (COT)"),
    end: date | None = Query(default=None, description="종료일 (COT, 포함)"),
    source: IEventSource = Depends(get_event_source),
) -> ChannelHistoryResponse:
    """결제 수단별 이력 및 종료 시점 잔액"""
    if start is not None and end is not None and start > end:
        raise HTTPException(
            status_code=422,
            detail=f"start must not be after end: {start} > {end}",
        )

    # 날짜 → COT 영업일 경계 (없는 쪽은 열린 구간)
    lower = day_bounds(start, start)[0] if start is not None else None
    upper = day_bounds(end, end)[1] if end is not None else None

    history = ChannelHistory(source)
    try:
        movements = await history.movements(channel, lower, upper)
        balance = await history.balance_until(channel, upper or now_utc())
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ChannelHistoryResponse(
        channel=channel.value,
        movements=[ChannelMovementResponse(**m.to_dict()) for m in movements],
        balance=str(balance),
    )
