"""
자본 변경 서비스 (Capital Mutation API)

초기 자본 등록, 자본 투입/인출 등록, 자본 변동 삭제.
모든 검증은 쓰기 전에 수행되며 실패 시 저장 상태는 변하지 않음.

주의: 인출은 현재 잔액으로 검증하지 않음 (지출과 달리 Solvency Gate 미적용)
"""

import logging
from datetime import datetime
from typing import Any, Mapping
from uuid import uuid4

from adapters.interfaces import IAuditStore, ICapitalRepository
from core.domain.exceptions import (
    AlreadyExists,
    EmptyConcept,
    InvalidAmounts,
    NotFound,
)
from core.domain.models import CapitalMovement, ChannelAmounts, InitialCapital
from core.types import Actor, AuditAction, MovementKind
from core.utils.timezone import ensure_utc, now_utc

logger = logging.getLogger(__name__)


def validate_amounts(amounts: ChannelAmounts) -> None:
    """수단별 금액 검증

    Raises:
        InvalidAmounts: 음수 포함 또는 모두 0
    """
    if amounts.has_negative():
        raise InvalidAmounts(
            "금액은 음수일 수 없습니다",
            {"amounts": amounts.to_dict()},
        )
    if amounts.is_all_zero():
        raise InvalidAmounts(
            "최소 한 수단의 금액은 0보다 커야 합니다",
            {"amounts": amounts.to_dict()},
        )


def _initial_capital_payload(record: InitialCapital) -> dict[str, Any]:
    return {
        "id": record.id,
        "amounts": record.amounts.to_dict(),
        "ts": record.ts.isoformat(),
        "created_by": record.created_by,
    }


class CapitalService:
    """자본 변경 서비스

    Args:
        repository: ICapitalRepository 구현체
        audit_store: IAuditStore 구현체 (None이면 감사 로그 생략)

    사용 예시:
    ```python
    service = CapitalService(CapitalStore(db), AuditStore(db))

    await service.create_initial_capital(
        {"cash": Decimal("100000")}, ts, Actor.user("admin")
    )
    ```
    """

    def __init__(
        self,
        repository: ICapitalRepository,
        audit_store: IAuditStore | None = None,
    ):
        self.repository = repository
        self.audit_store = audit_store

    async def create_initial_capital(
        self,
        amounts: ChannelAmounts | Mapping[Any, Any],
        ts: datetime,
        author: Actor,
    ) -> InitialCapital:
        """초기 자본 등록 (시스템 전체 1회)

        Raises:
            InvalidAmounts: 음수 포함 또는 모두 0
            AlreadyExists: 이미 등록됨
        """
        if not isinstance(amounts, ChannelAmounts):
            amounts = ChannelAmounts.from_mapping(amounts)
        validate_amounts(amounts)

        existing = await self.repository.fetch_initial_capital()
        if existing is not None:
            raise AlreadyExists(
                "초기 자본이 이미 등록되어 있습니다",
                {"capital_id": existing.id},
            )

        record = InitialCapital(
            id=str(uuid4()),
            amounts=amounts,
            ts=ensure_utc(ts),
            created_by=author.id,
            created_at=now_utc(),
        )

        # 저장소의 조건부 삽입이 경합 시 AlreadyExists 발생
        await self.repository.insert_initial_capital(record)

        logger.info(
            "초기 자본 등록",
            extra={"capital_id": record.id, "total": str(amounts.total), "actor": author.id},
        )

        await self._audit(
            AuditAction.CREATE_INITIAL_CAPITAL,
            "initial_capital",
            record.id,
            f"초기 자본 등록: {amounts.total}",
            author,
            after=_initial_capital_payload(record),
        )

        return record

    async def create_movement(
        self,
        kind: MovementKind | str,
        amounts: ChannelAmounts | Mapping[Any, Any],
        concept: str,
        ts: datetime,
        author: Actor,
        notes: str | None = None,
    ) -> CapitalMovement:
        """자본 투입/인출 등록

        Raises:
            InvalidAmounts: 음수 포함 또는 모두 0
            EmptyConcept: 사유가 비어 있음
        """
        kind = MovementKind(kind)
        if not isinstance(amounts, ChannelAmounts):
            amounts = ChannelAmounts.from_mapping(amounts)

        validate_amounts(amounts)

        concept = (concept or "").strip()
        if not concept:
            raise EmptyConcept("사유(concept)를 입력해야 합니다")

        record = CapitalMovement(
            id=str(uuid4()),
            kind=kind,
            amounts=amounts,
            concept=concept,
            ts=ensure_utc(ts),
            created_by=author.id,
            created_at=now_utc(),
            notes=notes.strip() if notes and notes.strip() else None,
        )

        await self.repository.insert_movement(record)

        logger.info(
            "자본 변동 등록",
            extra={
                "movement_id": record.id,
                "kind": kind.value,
                "total": str(amounts.total),
                "actor": author.id,
            },
        )

        await self._audit(
            AuditAction.CREATE_CAPITAL_MOVEMENT,
            "capital_movement",
            record.id,
            f"자본 {'투입' if kind == MovementKind.INJECTION else '인출'}: {concept}",
            author,
            after=record.to_dict(),
        )

        return record

    async def delete_movement(self, movement_id: str, author: Actor) -> CapitalMovement:
        """자본 변동 삭제 (관리자 작업)

        잔액은 저장하지 않으므로 다음 조회 시 자동 반영.

        Raises:
            NotFound: 대상 없음
        """
        record = await self.repository.get_movement(movement_id)
        if record is None:
            raise NotFound(
                "자본 변동을 찾을 수 없습니다",
                {"movement_id": movement_id},
            )

        deleted = await self.repository.delete_movement(movement_id)
        if not deleted:
            # 조회와 삭제 사이에 다른 요청이 먼저 삭제함
            raise NotFound(
                "자본 변동을 찾을 수 없습니다",
                {"movement_id": movement_id},
            )

        logger.info(
            "자본 변동 삭제",
            extra={"movement_id": movement_id, "actor": author.id},
        )

        await self._audit(
            AuditAction.DELETE_CAPITAL_MOVEMENT,
            "capital_movement",
            movement_id,
            f"자본 변동 삭제: {record.concept}",
            author,
            before=record.to_dict(),
        )

        return record

    async def get_initial_capital(self) -> InitialCapital | None:
        """초기 자본 조회"""
        return await self.repository.fetch_initial_capital()

    async def _audit(
        self,
        action: AuditAction,
        entity_kind: str,
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
                entity_kind,
                entity_id,
                description,
                author.id,
                before=before,
                after=after,
            )
        except Exception as e:
            logger.error(
                "감사 로그 기록 실패",
                extra={"action": action.value, "entity_id": entity_id, "error": str(e)},
            )
