"""
지출 서비스

일반 지출 등록 (Solvency Gate 통과 시에만), 조회/삭제 및 지출 항목 관리.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from adapters.interfaces import IAuditStore, IExpenseRepository
from core.domain.exceptions import (
    EmptyConcept,
    InsufficientBalance,
    NonPositiveAmount,
    NotFound,
    SourceUnavailable,
)
from core.domain.models import (
    ZERO,
    BalanceSnapshot,
    Expense,
    ExpenseConcept,
    to_decimal,
)
from core.ledger.aggregator import BalanceAggregator
from core.ledger.solvency import admissible_channels, is_admissible
from core.types import Actor, AuditAction, Channel
from core.utils.timezone import day_bounds, ensure_utc, now_utc

logger = logging.getLogger(__name__)


class ExpenseService:
    """지출 서비스

    Args:
        repository: IExpenseRepository 구현체
        aggregator: 현재 잔액 계산용 BalanceAggregator
        audit_store: IAuditStore 구현체 (None이면 감사 로그 생략)
    """

    def __init__(
        self,
        repository: IExpenseRepository,
        aggregator: BalanceAggregator,
        audit_store: IAuditStore | None = None,
    ):
        self.repository = repository
        self.aggregator = aggregator
        self.audit_store = audit_store

    async def record_expense(
        self,
        concept_id: str,
        amount: Decimal | int | str,
        channel: Channel | str,
        ts: datetime,
        description: str,
        author: Actor,
    ) -> Expense:
        """지출 등록

        Raises:
            NonPositiveAmount: 금액이 0 이하
            NotFound: 지출 항목이 없거나 비활성
            SourceUnavailable: 잔액을 계산할 수 없음
            InsufficientBalance: 선택한 수단 잔액 부족
        """
        value = to_decimal(amount)
        if value <= ZERO:
            raise NonPositiveAmount(amount)
        channel = Channel(channel)

        concept = await self.repository.get_concept(concept_id)
        if concept is None or not concept.is_active:
            raise NotFound(
                "지출 항목을 찾을 수 없습니다",
                {"concept_id": concept_id},
            )

        balances = await self._current_balances(
            "잔액을 확인할 수 없어 지출을 등록하지 않았습니다"
        )

        if not is_admissible(balances, value, channel):
            available = admissible_channels(balances, value)
            raise InsufficientBalance(
                f"{channel.value} 잔액이 부족합니다 "
                f"(잔액 {balances[channel]}, 요청 {value}). "
                f"사용 가능 수단: {', '.join(c.value for c in available) or '없음'}",
                {
                    "channel": channel.value,
                    "balance": str(balances[channel]),
                    "amount": str(value),
                    "available_channels": [c.value for c in available],
                },
            )

        record = Expense(
            id=str(uuid4()),
            concept_id=concept.id,
            concept_name=concept.name,
            amount=value,
            ts=ensure_utc(ts),
            channel=channel,
            description=description or "",
            created_by=author.id,
            created_at=now_utc(),
        )

        await self.repository.insert_expense(record)

        logger.info(
            "지출 등록",
            extra={
                "expense_id": record.id,
                "amount": str(value),
                "channel": channel.value,
                "actor": author.id,
            },
        )

        await self._audit(
            AuditAction.CREATE_EXPENSE,
            record.id,
            f"지출 등록: {concept.name} {value}",
            author,
            after=record.to_dict(),
        )

        return record

    async def available_channels(self, amount: Decimal | int | str) -> list[Channel]:
        """금액을 감당할 수 있는 수단 목록 (현재 잔액 기준)

        Raises:
            NonPositiveAmount: 금액이 0 이하
            SourceUnavailable: 잔액을 계산할 수 없음
        """
        if to_decimal(amount) <= ZERO:
            raise NonPositiveAmount(amount)
        balances = await self._current_balances(
            "잔액을 확인할 수 없어 지급 가능 수단을 판단하지 못했습니다"
        )
        return admissible_channels(balances, amount)

    async def list_expenses(
        self,
        start: date | datetime,
        end: date | datetime,
    ) -> list[Expense]:
        """기간 내 지출 목록 (최신순)

        start/end는 COT 영업일, 종료일 포함.

        Raises:
            ValueError: 시작일이 종료일보다 늦은 경우
            SourceUnavailable: 조회 실패
        """
        lower, upper = day_bounds(start, end)

        try:
            expenses = await self.repository.fetch_expenses_in_range(lower, upper)
        except Exception as e:
            logger.error(
                "지출 조회 실패",
                extra={"start": str(start), "end": str(end), "error": str(e)},
            )
            raise SourceUnavailable(
                "지출 데이터를 불러오지 못했습니다",
                {"start": str(start), "end": str(end)},
            ) from e

        return sorted(expenses, key=lambda e: (ensure_utc(e.ts), e.id), reverse=True)

    async def delete_expense(self, expense_id: str, author: Actor) -> Expense:
        """지출 삭제 (관리자 정정)

        잔액은 저장하지 않으므로 다음 조회 시 자동 반영.

        Raises:
            NotFound: 대상 없음
        """
        record = await self.repository.get_expense(expense_id)
        if record is None or not await self.repository.delete_expense(expense_id):
            raise NotFound(
                "지출을 찾을 수 없습니다",
                {"expense_id": expense_id},
            )

        logger.info(
            "지출 삭제",
            extra={"expense_id": expense_id, "actor": author.id},
        )

        await self._audit(
            AuditAction.DELETE_EXPENSE,
            expense_id,
            f"지출 삭제: {record.concept_name} {record.amount}",
            author,
            before=record.to_dict(),
        )

        return record

    # -------------------------------------------------------------------------
    # 지출 항목
    # -------------------------------------------------------------------------

    async def create_concept(self, name: str, description: str | None = None) -> ExpenseConcept:
        """지출 항목 생성

        Raises:
            EmptyConcept: 이름이 비어 있음
        """
        name = (name or "").strip()
        if not name:
            raise EmptyConcept("지출 항목 이름을 입력해야 합니다")

        record = ExpenseConcept(
            id=str(uuid4()),
            name=name,
            created_at=now_utc(),
            description=description,
        )
        await self.repository.insert_concept(record)

        logger.info("지출 항목 생성", extra={"concept_id": record.id, "concept_name": name})
        return record

    async def update_concept(
        self,
        concept_id: str,
        name: str,
        description: str | None = None,
    ) -> ExpenseConcept:
        """지출 항목 수정 (기존 지출의 항목 이름은 유지)

        Raises:
            EmptyConcept: 이름이 비어 있음
            NotFound: 대상 없음 또는 비활성
        """
        name = (name or "").strip()
        if not name:
            raise EmptyConcept("지출 항목 이름을 입력해야 합니다")

        if not await self.repository.update_concept(concept_id, name, description):
            raise NotFound(
                "지출 항목을 찾을 수 없습니다",
                {"concept_id": concept_id},
            )

        logger.info("지출 항목 수정", extra={"concept_id": concept_id, "concept_name": name})

        concept = await self.repository.get_concept(concept_id)
        assert concept is not None
        return concept

    async def list_active_concepts(self) -> list[ExpenseConcept]:
        return await self.repository.list_active_concepts()

    async def deactivate_concept(self, concept_id: str) -> None:
        """지출 항목 비활성화 (기존 지출 기록은 유지)

        Raises:
            NotFound: 대상 없음 또는 이미 비활성
        """
        if not await self.repository.deactivate_concept(concept_id):
            raise NotFound(
                "지출 항목을 찾을 수 없습니다",
                {"concept_id": concept_id},
            )
        logger.info("지출 항목 비활성화", extra={"concept_id": concept_id})

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    async def _current_balances(self, message: str) -> BalanceSnapshot:
        """현재 잔액 (degraded면 SourceUnavailable)

        0 잔액으로 판정하면 모든 수단이 거부되므로 재시도 유도.
        """
        balances = await self.aggregator.current_balances()
        if balances.degraded:
            raise SourceUnavailable(message, {"warning": balances.warning})
        return balances

    async def _audit(
        self,
        action: AuditAction,
        entity_id: str,
        description: str,
        author: Actor,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> None:
        """감사 로그 기록 (실패해도 변경은 유지)"""
        if self.audit_store is None:
            return

        try:
            await self.audit_store.log(
                action.value,
                "expense",
                entity_id,
                description,
                author.id,
                before=before,
                after=after,
            )
        except Exception as e:
            logger.error(
                "감사 로그 기록 실패",
                extra={"action": action.value, "expense_id": entity_id, "error": str(e)},
            )
