"""
자본 원장 (Capital Ledger)

원천 이벤트(초기 자본, 자본 변동, 주문 결제, 지출, 정비)에서
기간 원장과 현재 잔액을 파생. 잔액은 저장하지 않고 항상 재계산.

사용 예시:
```python
from core.ledger import LedgerBuilder, BalanceAggregator, admissible_channels

entries = await LedgerBuilder(source).build(start, end)

balances = await BalanceAggregator(source).current_balances()
channels = admissible_channels(balances, Decimal("40000"))
```
"""

from core.ledger.aggregator import BalanceAggregator
from core.ledger.builder import LedgerBuilder, LedgerSummary, is_payment_echo
from core.ledger.history import ChannelHistory, ChannelMovement
from core.ledger.solvency import admissible_channels, is_admissible

__all__ = [
    # 핵심 클래스
    "LedgerBuilder",
    "LedgerSummary",
    "BalanceAggregator",
    "ChannelHistory",
    "ChannelMovement",
    # 함수
    "is_payment_echo",
    "is_admissible",
    "admissible_channels",
]
