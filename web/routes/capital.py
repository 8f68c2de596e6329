"""
자본 API 라우트

현재 잔액, 초기 자본, 자본 투입/인출 조회 및 등록.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from adapters.interfaces import IEventSource
from core.capital.service import CapitalService
from core.domain.exceptions import LedgerError, SourceUnavailable
from core.ledger.aggregator import BalanceAggregator
from core.types import Actor
from core.utils.timezone import now_utc
from web.dependencies import get_capital_service, get_event_source
from web.errors import to_http_exception
from web.models.requests import CapitalMovementRequest, InitialCapitalRequest
from web.models.responses import (
    BalancesResponse,
    CapitalMovementResponse,
    InitialCapitalResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/capital", tags=["Capital"])


@router.get("/balances", response_model=BalancesResponse)
async def get_balances(
    source: IEventSource = Depends(get_event_source),
) -> BalancesResponse:
    """수단별 현재 잔액

    조회 실패 시 0 잔액과 degraded=True 반환 (오류 아님).
    """
    snapshot = await BalanceAggregator(source).current_balances()
    return BalancesResponse.from_snapshot(snapshot)


@router.get("/initial", response_model=InitialCapitalResponse)
async def get_initial_capital(
    source: IEventSource = Depends(get_event_source),
) -> InitialCapitalResponse:
    """초기 자본 조회"""
    try:
        record = await source.fetch_initial_capital()
    except Exception as e:
        raise to_http_exception(
            SourceUnavailable("초기 자본을 불러오지 못했습니다")
        ) from e

    if record is None:
        raise HTTPException(status_code=404, detail="Initial capital not registered")

    return InitialCapitalResponse.from_record(record)


@router.post("/initial", response_model=InitialCapitalResponse, status_code=201)
async def create_initial_capital(
    request: InitialCapitalRequest,
    service: CapitalService = Depends(get_capital_service),
) -> InitialCapitalResponse:
    """초기 자본 등록 (1회만 가능, 중복 시 409)"""
    try:
        record = await service.create_initial_capital(
            request.to_amounts(),
            request.ts or now_utc(),
            Actor.user(request.author),
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return InitialCapitalResponse.from_record(record)


@router.get("/movements", response_model=list[CapitalMovementResponse])
async def list_movements(
    source: IEventSource = Depends(get_event_source),
) -> list[CapitalMovementResponse]:
    """자본 투입/인출 목록 (시각순)"""
    try:
        movements = await source.fetch_all_movements()
    except Exception as e:
        raise to_http_exception(
            SourceUnavailable("자본 변동을 불러오지 못했습니다")
        ) from e

    return [CapitalMovementResponse.from_record(m) for m in movements]


@router.post("/movements", response_model=CapitalMovementResponse, status_code=201)
async def create_movement(
    request: CapitalMovementRequest,
    service: CapitalService = Depends(get_capital_service),
) -> CapitalMovementResponse:
    """자본 투입/인출 등록

    인출은 현재 잔액으로 검증하지 않음.
    """
    try:
        record = await service.create_movement(
            request.kind,
            request.to_amounts(),
            request.concept,
            request.ts or now_utc(),
            Actor.user(request.author),
            notes=request.notes,
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return CapitalMovementResponse.from_record(record)


@router.delete("/movements/{movement_id}", response_model=CapitalMovementResponse)
async def delete_movement(
    movement_id: str = Path(..., description="자본 변동 ID"),
    author: str = Query(..., min_length=1, description="작성자 ID"),
    service: CapitalService = Depends(get_capital_service),
) -> CapitalMovementResponse:
    """자본 변동 삭제 (관리자 작업)"""
    try:
        record = await service.delete_movement(movement_id, Actor.user(author))
    except LedgerError as e:
        raise to_http_exception(e) from e

    return CapitalMovementResponse.from_record(record)
