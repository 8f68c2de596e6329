"""
지출 API 라우트

지출 등록 (잔액 검증 포함), 조회/삭제 및 지출 항목 관리.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from core.domain.exceptions import LedgerError
from core.expenses.service import ExpenseService
from core.types import Actor
from core.utils.timezone import now_utc
from web.dependencies import get_expense_query_service, get_expense_service
from web.errors import to_http_exception
from web.models.requests import ExpenseConceptRequest, ExpenseRequest
from web.models.responses import ExpenseConceptResponse, ExpenseResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/expenses", tags=["Expenses"])


@router.get("", response_model=list[ExpenseResponse])
async def list_expenses(
    start: date = Query(..., description="시작일 (YYYY-MM-DD, COT)"),
    end: date = Query(..., description="종료일 (YYYY-MM-DD, COT, 포함)"),
    service: ExpenseService = Depends(get_expense_query_service),
) -> list[ExpenseResponse]:
    """기간 내 지출 목록 (최신순)"""
    if start > end:
        raise HTTPException(
            status_code=422,
            detail=f"start must not be after end: {start} > {end}",
        )

    try:
        expenses = await service.list_expenses(start, end)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return [ExpenseResponse.from_record(e) for e in expenses]


@router.post("", response_model=ExpenseResponse, status_code=201)
async def record_expense(
    request: ExpenseRequest,
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    """지출 등록

    선택한 수단 잔액이 부족하면 422 (InsufficientBalance).
    """
    try:
        record = await service.record_expense(
            request.concept_id,
            request.amount,
            request.channel,
            request.ts or now_utc(),
            request.description,
            Actor.user(request.author),
        )
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ExpenseResponse.from_record(record)


@router.delete("/{expense_id}", response_model=ExpenseResponse)
async def delete_expense(
    expense_id: str = Path(..., description="지출 ID"),
    author: str = Query(..., min_length=1, description="작성자 ID"),
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    """지출 삭제 (관리자 정정)"""
    try:
        record = await service.delete_expense(expense_id, Actor.user(author))
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ExpenseResponse.from_record(record)


@router.get("/concepts", response_model=list[ExpenseConceptResponse])
async def list_concepts(
    service: ExpenseService = Depends(get_expense_query_service),
) -> list[ExpenseConceptResponse]:
    """활성 지출 항목 목록"""
    concepts = await service.list_active_concepts()
    return [ExpenseConceptResponse.from_record(c) for c in concepts]


@router.post("/concepts", response_model=ExpenseConceptResponse, status_code=201)
async def create_concept(
    request: ExpenseConceptRequest,
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseConceptResponse:
    """지출 항목 생성"""
    try:
        record = await service.create_concept(request.name, request.description)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ExpenseConceptResponse.from_record(record)


@router.put("/concepts/{concept_id}", response_model=ExpenseConceptResponse)
async def update_concept(
    request: ExpenseConceptRequest,
    concept_id: str = Path(..., description="지출 항목 ID"),
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseConceptResponse:
    """지출 항목 수정 (기존 지출 기록의 항목 이름은 유지)"""
    try:
        record = await service.update_concept(concept_id, request.name, request.description)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return ExpenseConceptResponse.from_record(record)


@router.delete("/concepts/{concept_id}")
async def deactivate_concept(
    concept_id: str = Path(..., description="지출 항목 ID"),
    service: ExpenseService = Depends(get_expense_service),
) -> dict[str, str]:
    """지출 항목 비활성화 (기존 지출 기록은 유지)"""
    try:
        await service.deactivate_concept(concept_id)
    except LedgerError as e:
        raise to_http_exception(e) from e

    return {"message": f"Concept deactivated: {concept_id}"}
