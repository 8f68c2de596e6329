"""
원장 생성기 (Ledger Builder)

기간 내 원천 이벤트를 LedgerEntry로 정규화하고
시간순 정렬 후 수단별 누적 잔액을 찍어 반환.

원천 이벤트:
- 초기 자본, 자본 변동: 기간과 무관하게 항상 포함 (기준선)
- 주문 결제: 결제 시각 기준
- 일반 지출: 지출일 기준
- 정비 비용: 생성 시각 기준
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from adapters.interfaces import IEventSource
from core.constants import Defaults
from core.domain.exceptions import SourceUnavailable
from core.domain.models import (
    ZERO,
    CapitalMovement,
    ChannelAmounts,
    Expense,
    InitialCapital,
    LedgerEntry,
    MaintenanceExpense,
    OrderPayment,
)
from core.types import Channel, EntryKind, EntrySource, MovementKind
from core.utils.timezone import day_bounds, ensure_utc, time_of_day

logger = logging.getLogger(__name__)


def is_payment_echo(movement: CapitalMovement, markers: Iterable[str]) -> bool:
    """주문 결제가 자본 변동으로도 기록된 경우인지 판별

    concept 또는 notes에 마커 문자열이 포함되면 True (대소문자 무시).
    """
    text = f"{movement.concept} {movement.notes or ''}".casefold()
    return any(marker.casefold() in text for marker in markers if marker)


def sort_key(entry: LedgerEntry) -> tuple[datetime, str, str]:
    """원장 정렬 키: 시각 → 시각 문자열(HH:MM) → entry_id"""
    return (ensure_utc(entry.ts), entry.time_of_day, entry.entry_id)


def apply_running_balances(entries: list[LedgerEntry]) -> list[LedgerEntry]:
    """정렬된 항목에 수단별 누적 잔액 기록 (0에서 시작, 단일 패스)"""
    running = {channel: ZERO for channel in Channel.ordered()}

    for entry in entries:
        running[entry.channel] += entry.signed_amount

        entry.balance_cash = running[Channel.CASH]
        entry.balance_wallet_a = running[Channel.WALLET_A]
        entry.balance_wallet_b = running[Channel.WALLET_B]
        entry.balance_total = sum(running.values(), ZERO)

    return entries


@dataclass(frozen=True)
class LedgerSummary:
    """원장 요약 (수입/지출 합계, 마감 잔액)"""

    income_total: Decimal = ZERO
    expense_total: Decimal = ZERO
    closing: ChannelAmounts = field(default_factory=ChannelAmounts)
    entry_count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income_total - self.expense_total

    def to_dict(self) -> dict:
        return {
            "income_total": str(self.income_total),
            "expense_total": str(self.expense_total),
            "net": str(self.net),
            "closing": {**self.closing.to_dict(), "total": str(self.closing.total)},
            "entry_count": self.entry_count,
        }


class LedgerBuilder:
    """기간 원장 생성기

    Args:
        sources: IEventSource 구현체
        payment_markers: 주문 결제 중복 기록 판별용 마커 문자열

    사용 예시:
    ```python
    builder = LedgerBuilder(event_source, payment_markers=settings.payment_markers)
    entries = await builder.build(date(2026, 3, 1), date(2026, 3, 31))
    summary = LedgerBuilder.summarize(entries)
    ```
    """

    def __init__(
        self,
        sources: IEventSource,
        payment_markers: Iterable[str] = Defaults.PAYMENT_MARKERS,
    ):
        self.sources = sources
        self.payment_markers = tuple(payment_markers)

    async def build(
        self,
        start: date | datetime,
        end: date | datetime,
    ) -> list[LedgerEntry]:
        """기간 원장 생성

        Args:
            start: 시작일 (COT 00:00:00부터)
            end: 종료일 (COT 23:59:59.999999까지, 포함)

        Returns:
            시간순 정렬 + 누적 잔액이 기록된 LedgerEntry 리스트

        Raises:
            ValueError: 시작일이 종료일보다 늦은 경우
            SourceUnavailable: 소스 조회 실패 (부분 결과 없음)
        """
        lower, upper = day_bounds(start, end)

        try:
            initial, movements, payments, expenses, maintenance = await asyncio.gather(
                self.sources.fetch_initial_capital(),
                self.sources.fetch_all_movements(),
                self.sources.fetch_payments_in_range(lower, upper),
                self.sources.fetch_expenses_in_range(lower, upper),
                self.sources.fetch_maintenance_in_range(lower, upper),
            )
        except Exception as e:
            logger.error(
                "원장 소스 조회 실패",
                extra={"start": str(start), "end": str(end), "error": str(e)},
            )
            raise SourceUnavailable(
                "원장 데이터를 불러오지 못했습니다",
                {"start": str(start), "end": str(end)},
            ) from e

        def in_window(ts: datetime) -> bool:
            return lower <= ensure_utc(ts) <= upper

        entries: list[LedgerEntry] = []

        # 기준선 이벤트 (기간 필터 없음)
        if initial is not None:
            entries.append(self._from_initial_capital(initial))

        echoes = 0
        for movement in movements:
            if is_payment_echo(movement, self.payment_markers):
                echoes += 1
                continue
            entries.append(self._from_movement(movement))

        entries.extend(self._from_payment(p) for p in payments if in_window(p.ts))
        entries.extend(self._from_expense(e) for e in expenses if in_window(e.ts))
        entries.extend(
            self._from_maintenance(m) for m in maintenance if in_window(m.created_at)
        )

        entries.sort(key=sort_key)
        apply_running_balances(entries)

        logger.debug(
            "원장 생성 완료",
            extra={
                "start": str(start),
                "end": str(end),
                "entries": len(entries),
                "payment_echoes_skipped": echoes,
            },
        )

        return entries

    @staticmethod
    def summarize(entries: list[LedgerEntry]) -> LedgerSummary:
        """원장 요약 (마감 잔액 = 마지막 항목의 누적 잔액)"""
        if not entries:
            return LedgerSummary()

        income = sum((e.amount for e in entries if e.kind == EntryKind.INCOME), ZERO)
        expense = sum((e.amount for e in entries if e.kind == EntryKind.EXPENSE), ZERO)

        return LedgerSummary(
            income_total=income,
            expense_total=expense,
            closing=entries[-1].balances,
            entry_count=len(entries),
        )

    # -------------------------------------------------------------------------
    # 원천 이벤트 → LedgerEntry
    # -------------------------------------------------------------------------

    @staticmethod
    def _from_initial_capital(record: InitialCapital) -> LedgerEntry:
        # 세 수단 합계를 cash 한 건으로 기록
        return LedgerEntry(
            entry_id=f"capital-initial-{record.id}",
            kind=EntryKind.INCOME,
            ts=record.ts,
            time_of_day=time_of_day(record.ts),
            concept="Initial capital",
            amount=record.amounts.total,
            channel=Channel.CASH,
            source=EntrySource.INITIAL_CAPITAL,
        )

    @staticmethod
    def _from_movement(record: CapitalMovement) -> LedgerEntry:
        is_injection = record.kind == MovementKind.INJECTION
        label = "Capital injection" if is_injection else "Capital withdrawal"

        return LedgerEntry(
            entry_id=f"movement-{record.id}",
            kind=EntryKind.INCOME if is_injection else EntryKind.EXPENSE,
            ts=record.ts,
            time_of_day=time_of_day(record.ts),
            concept=f"{label} - {record.concept}",
            amount=record.amounts.total,
            channel=Channel.CASH,
            source=EntrySource.CAPITAL_MOVEMENT,
            reference=record.notes,
        )

    @staticmethod
    def _from_payment(record: OrderPayment) -> LedgerEntry:
        return LedgerEntry(
            entry_id=f"payment-{record.payment_id}",
            kind=EntryKind.INCOME,
            ts=record.ts,
            time_of_day=time_of_day(record.ts),
            concept=f"Service payment - {record.plan_name or record.order_id}",
            amount=record.amount,
            channel=record.channel,
            source=EntrySource.ORDER_PAYMENT,
            client=record.client_name,
            plan=record.plan_name,
            reference=record.reference,
        )

    @staticmethod
    def _from_expense(record: Expense) -> LedgerEntry:
        return LedgerEntry(
            entry_id=f"expense-{record.id}",
            kind=EntryKind.EXPENSE,
            ts=record.ts,
            time_of_day=time_of_day(record.ts),
            concept=record.concept_name,
            amount=record.amount,
            channel=record.channel,
            source=EntrySource.EXPENSE,
            reference=record.description or None,
        )

    @staticmethod
    def _from_maintenance(record: MaintenanceExpense) -> LedgerEntry:
        return LedgerEntry(
            entry_id=f"maint-{record.id}",
            kind=EntryKind.EXPENSE,
            ts=record.created_at,
            time_of_day=time_of_day(record.created_at),
            concept=f"Maintenance - {record.equipment_id}",
            amount=record.cost,
            channel=record.channel,
            source=EntrySource.MAINTENANCE,
            reference=record.description or None,
        )
