"""
지급 가능 여부 판정 (Solvency Gate)

지출 등록 전 선택한 결제 수단의 잔액이 충분한지 확인.
순수 함수이며 I/O 없음.
"""

from decimal import Decimal
from typing import Any, Mapping

from core.domain.exceptions import NonPositiveAmount
from core.domain.models import ZERO, BalanceSnapshot, ChannelAmounts, to_decimal
from core.types import Channel

Balances = BalanceSnapshot | ChannelAmounts | Mapping[Any, Any]


def _balance_of(balances: Balances, channel: Channel) -> Decimal:
    if isinstance(balances, (BalanceSnapshot, ChannelAmounts)):
        return balances[channel]
    return ChannelAmounts.from_mapping(balances).get(channel)


def _require_positive(amount: Decimal | int | str) -> Decimal:
    value = to_decimal(amount)
    if value <= ZERO:
        raise NonPositiveAmount(amount)
    return value


def is_admissible(
    balances: Balances,
    amount: Decimal | int | str,
    channel: Channel | str,
) -> bool:
    """해당 수단 잔액 >= 금액 이면 True

    Raises:
        NonPositiveAmount: 금액이 0 이하인 경우
    """
    value = _require_positive(amount)
    return _balance_of(balances, Channel(channel)) >= value


def admissible_channels(
    balances: Balances,
    amount: Decimal | int | str,
) -> list[Channel]:
    """금액을 감당할 수 있는 수단 목록 (cash, wallet_a, wallet_b 순)

    Raises:
        NonPositiveAmount: 금액이 0 이하인 경우
    """
    value = _require_positive(amount)
    return [
        channel
        for channel in Channel.ordered()
        if _balance_of(balances, channel) >= value
    ]
