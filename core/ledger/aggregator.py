"""
잔액 집계기 (Balance Aggregator)

전체 이력을 수단별 현재 잔액으로 축약.
기간 원장과 달리 날짜 필터와 결제 마커 필터가 없음.

소스 조회 실패 시 예외 대신 0 잔액 + 경고를 반환 (degraded).
"""

import asyncio
import logging

from adapters.interfaces import IEventSource
from core.domain.models import BalanceSnapshot, ChannelAmounts
from core.types import Channel

logger = logging.getLogger(__name__)


DEGRADED_WARNING = "잔액을 계산하지 못했습니다. 0으로 표시되며 잠시 후 다시 시도하세요."


class BalanceAggregator:
    """현재 잔액 집계기

    Args:
        sources: IEventSource 구현체
    """

    def __init__(self, sources: IEventSource):
        self.sources = sources

    async def current_balances(self) -> BalanceSnapshot:
        """수단별 현재 잔액

        초기 자본 + 투입 - 인출 + 결제 - 지출 - 정비 (수단별).

        Returns:
            BalanceSnapshot (조회 실패 시 degraded=True, 전부 0)
        """
        try:
            initial, movements, payments, expenses, maintenance = await asyncio.gather(
                self.sources.fetch_initial_capital(),
                self.sources.fetch_all_movements(),
                self.sources.fetch_payments_in_range(None, None),
                self.sources.fetch_expenses_in_range(None, None),
                self.sources.fetch_maintenance_in_range(None, None),
            )
        except Exception as e:
            logger.warning(
                "잔액 집계 실패, 0 잔액 반환",
                extra={"error": str(e)},
            )
            return BalanceSnapshot(
                amounts=ChannelAmounts.zero(),
                degraded=True,
                warning=DEGRADED_WARNING,
            )

        capital = initial.amounts if initial is not None else ChannelAmounts.zero()
        for movement in movements:
            if movement.sign > 0:
                capital = capital.plus(movement.amounts)
            else:
                capital = capital.minus(movement.amounts)

        balances = {channel: capital.get(channel) for channel in Channel.ordered()}

        for payment in payments:
            balances[payment.channel] += payment.amount

        for expense in expenses:
            balances[expense.channel] -= expense.amount

        for record in maintenance:
            balances[record.channel] -= record.cost

        snapshot = BalanceSnapshot(amounts=ChannelAmounts.from_mapping(balances))

        logger.debug("잔액 집계 완료", extra=snapshot.to_dict())

        return snapshot
