"""
수단별 이력 (Channel History)

하나의 결제 수단에 영향을 준 모든 이벤트와 특정 시점까지의 잔액.
원장과 달리 자본 기록을 합산하지 않고 수단별 금액 그대로 사용.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from adapters.interfaces import IEventSource
from core.domain.exceptions import SourceUnavailable
from core.domain.models import ZERO
from core.types import Channel, EntryKind, EntrySource, MovementKind
from core.utils.timezone import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelMovement:
    """단일 수단 변동"""

    movement_id: str
    channel: Channel
    kind: EntryKind
    amount: Decimal
    ts: datetime
    concept: str
    source: EntrySource

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind == EntryKind.INCOME else -self.amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "movement_id": self.movement_id,
            "channel": self.channel.value,
            "kind": self.kind.value,
            "amount": str(self.amount),
            "ts": self.ts.isoformat(),
            "concept": self.concept,
            "source": self.source.value,
        }


class ChannelHistory:
    """수단별 이력 조회

    Args:
        sources: IEventSource 구현체
    """

    def __init__(self, sources: IEventSource):
        self.sources = sources

    async def movements(
        self,
        channel: Channel | str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ChannelMovement]:
        """수단에 영향을 준 이벤트 (시각 → id 순)

        Args:
            channel: 결제 수단
            start: 구간 시작 (포함, None이면 제한 없음)
            end: 구간 끝 (포함, None이면 제한 없음)

        Raises:
            SourceUnavailable: 소스 조회 실패
        """
        channel = Channel(channel)

        try:
            initial, movements, payments, expenses, maintenance = await asyncio.gather(
                self.sources.fetch_initial_capital(),
                self.sources.fetch_all_movements(),
                self.sources.fetch_payments_in_range(start, end),
                self.sources.fetch_expenses_in_range(start, end),
                self.sources.fetch_maintenance_in_range(start, end),
            )
        except Exception as e:
            logger.error(
                "수단 이력 조회 실패",
                extra={"channel": channel.value, "error": str(e)},
            )
            raise SourceUnavailable(
                "결제 수단 이력을 불러오지 못했습니다",
                {"channel": channel.value},
            ) from e

        result: list[ChannelMovement] = []

        if initial is not None and initial.amounts.get(channel) > ZERO:
            result.append(
                ChannelMovement(
                    movement_id=f"capital-initial-{initial.id}",
                    channel=channel,
                    kind=EntryKind.INCOME,
                    amount=initial.amounts.get(channel),
                    ts=initial.ts,
                    concept="Initial capital",
                    source=EntrySource.INITIAL_CAPITAL,
                )
            )

        for movement in movements:
            amount = movement.amounts.get(channel)
            if amount <= ZERO:
                continue
            is_injection = movement.kind == MovementKind.INJECTION
            result.append(
                ChannelMovement(
                    movement_id=f"movement-{movement.id}",
                    channel=channel,
                    kind=EntryKind.INCOME if is_injection else EntryKind.EXPENSE,
                    amount=amount,
                    ts=movement.ts,
                    concept=movement.concept,
                    source=EntrySource.CAPITAL_MOVEMENT,
                )
            )

        result.extend(
            ChannelMovement(
                movement_id=f"payment-{p.payment_id}",
                channel=channel,
                kind=EntryKind.INCOME,
                amount=p.amount,
                ts=p.ts,
                concept=f"Service payment - {p.plan_name or p.order_id}",
                source=EntrySource.ORDER_PAYMENT,
            )
            for p in payments
            if p.channel == channel
        )
        result.extend(
            ChannelMovement(
                movement_id=f"expense-{e.id}",
                channel=channel,
                kind=EntryKind.EXPENSE,
                amount=e.amount,
                ts=e.ts,
                concept=e.concept_name,
                source=EntrySource.EXPENSE,
            )
            for e in expenses
            if e.channel == channel
        )
        result.extend(
            ChannelMovement(
                movement_id=f"maint-{m.id}",
                channel=channel,
                kind=EntryKind.EXPENSE,
                amount=m.cost,
                ts=m.created_at,
                concept=f"Maintenance - {m.equipment_id}",
                source=EntrySource.MAINTENANCE,
            )
            for m in maintenance
            if m.channel == channel
        )

        # 자본 기록은 구간 필터 없이 조회되므로 여기서 구간 적용
        result = [m for m in result if _within(m.ts, start, end)]
        result.sort(key=lambda m: (ensure_utc(m.ts), m.movement_id))
        return result

    async def balance_until(self, channel: Channel | str, limit: datetime) -> Decimal:
        """limit 시각(포함)까지의 수단 잔액"""
        history = await self.movements(channel, None, limit)
        return sum((m.signed_amount for m in history), ZERO)


def _within(ts: datetime, start: datetime | None, end: datetime | None) -> bool:
    ts = ensure_utc(ts)
    if start is not None and ts < ensure_utc(start):
        return False
    if end is not None and ts > ensure_utc(end):
        return False
    return True
