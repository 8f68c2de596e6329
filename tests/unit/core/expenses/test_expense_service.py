"""
ExpenseService 테스트

Solvency Gate 적용 지출 등록, 지출 항목 관리
"""

from datetime import date
from decimal import Decimal

import pytest

from adapters.mock.ledger_repository import InMemoryLedgerRepository
from core.domain.exceptions import (
    EmptyConcept,
    InsufficientBalance,
    NonPositiveAmount,
    NotFound,
    SourceUnavailable,
)
from core.expenses.service import ExpenseService
from core.ledger.aggregator import BalanceAggregator
from core.types import Actor, AuditAction, Channel, MovementKind
from tests.utils.helpers import (
    cot,
    make_concept,
    make_expense,
    make_initial_capital,
    make_movement,
)


@pytest.fixture
def admin() -> Actor:
    return Actor.user("admin")


@pytest.fixture
def funded(repo: InMemoryLedgerRepository) -> InMemoryLedgerRepository:
    """cash 70000, wallet_a 50000, wallet_b 0 + 활성 지출 항목"""
    repo.initial_capital = make_initial_capital(cash=70000)
    repo.movements["m-1"] = make_movement(
        "m-1", MovementKind.INJECTION, cot(2026, 1, 2), wallet_a=50000
    )
    concept = make_concept()
    repo.concepts[concept.id] = concept
    return repo


@pytest.fixture
def service(funded: InMemoryLedgerRepository) -> ExpenseService:
    return ExpenseService(funded, BalanceAggregator(funded), audit_store=funded)


class TestRecordExpense:
    """record_expense 테스트"""

    @pytest.mark.asyncio
    async def test_record(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        record = await service.record_expense(
            "c-supplies", "30000", Channel.CASH, cot(2026, 2, 1), "detergent", admin
        )

        assert funded.expenses == [record]
        assert record.concept_name == "Supplies"
        assert record.amount == Decimal("30000")

        snapshot = await BalanceAggregator(funded).current_balances()
        assert snapshot.cash == Decimal("40000")

    @pytest.mark.asyncio
    async def test_exact_balance_allowed(self, service: ExpenseService, admin: Actor) -> None:
        await service.record_expense(
            "c-supplies", 50000, "wallet_a", cot(2026, 2, 1), "", admin
        )

    @pytest.mark.asyncio
    async def test_insufficient_lists_alternatives(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        """잔액 부족 시 대안 수단 안내, 기록 없음"""
        with pytest.raises(InsufficientBalance) as exc_info:
            await service.record_expense(
                "c-supplies", 60000, Channel.WALLET_A, cot(2026, 2, 1), "", admin
            )

        assert exc_info.value.details["available_channels"] == ["cash"]
        assert exc_info.value.details["balance"] == "50000"
        assert funded.expenses == []
        assert "insert_expense" not in funded.call_counts

    @pytest.mark.asyncio
    async def test_no_channel_available(self, service: ExpenseService, admin: Actor) -> None:
        with pytest.raises(InsufficientBalance) as exc_info:
            await service.record_expense(
                "c-supplies", 80000, Channel.CASH, cot(2026, 2, 1), "", admin
            )

        assert exc_info.value.details["available_channels"] == []

    @pytest.mark.parametrize("amount", [0, -5])
    @pytest.mark.asyncio
    async def test_non_positive(self, service: ExpenseService, admin: Actor, amount: int) -> None:
        with pytest.raises(NonPositiveAmount):
            await service.record_expense(
                "c-supplies", amount, Channel.CASH, cot(2026, 2, 1), "", admin
            )

    @pytest.mark.asyncio
    async def test_unknown_concept(self, service: ExpenseService, admin: Actor) -> None:
        with pytest.raises(NotFound):
            await service.record_expense("nope", 1, Channel.CASH, cot(2026, 2, 1), "", admin)

    @pytest.mark.asyncio
    async def test_inactive_concept(self, service: ExpenseService, admin: Actor) -> None:
        await service.deactivate_concept("c-supplies")

        with pytest.raises(NotFound):
            await service.record_expense(
                "c-supplies", 1, Channel.CASH, cot(2026, 2, 1), "", admin
            )

    @pytest.mark.asyncio
    async def test_degraded_balances_rejected(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        """잔액 조회 실패 시 재시도 가능한 오류"""
        funded.fail_methods.add("fetch_all_movements")

        with pytest.raises(SourceUnavailable) as exc_info:
            await service.record_expense(
                "c-supplies", 1, Channel.CASH, cot(2026, 2, 1), "", admin
            )

        assert exc_info.value.retryable is True
        assert funded.expenses == []

    @pytest.mark.asyncio
    async def test_audited(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        record = await service.record_expense(
            "c-supplies", 100, Channel.CASH, cot(2026, 2, 1), "", admin
        )

        assert len(funded.audit_log) == 1
        audit = funded.audit_log[0]
        assert audit.action == AuditAction.CREATE_EXPENSE.value
        assert audit.entity_id == record.id
        assert audit.after["channel"] == "cash"

    @pytest.mark.asyncio
    async def test_audit_failure_keeps_expense(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        funded.fail_methods.add("log")

        record = await service.record_expense(
            "c-supplies", 100, Channel.CASH, cot(2026, 2, 1), "", admin
        )

        assert funded.expenses == [record]


class TestAvailableChannels:
    """available_channels 테스트"""

    @pytest.mark.asyncio
    async def test_scenario(self, service: ExpenseService) -> None:
        assert await service.available_channels(40000) == [Channel.CASH, Channel.WALLET_A]

    @pytest.mark.asyncio
    async def test_non_positive(self, service: ExpenseService) -> None:
        with pytest.raises(NonPositiveAmount):
            await service.available_channels(0)

    @pytest.mark.asyncio
    async def test_degraded_is_not_empty_list(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
    ) -> None:
        """잔액 조회 실패는 '감당 가능한 수단 없음'과 구분"""
        funded.should_fail = True

        with pytest.raises(SourceUnavailable) as exc_info:
            await service.available_channels(1)

        assert exc_info.value.retryable is True
        assert exc_info.value.details["warning"]


class TestListExpenses:
    """list_expenses 테스트"""

    @pytest.mark.asyncio
    async def test_window_newest_first(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
    ) -> None:
        funded.expenses.extend(
            [
                make_expense("e-1", 100, cot(2026, 2, 1, 9)),
                make_expense("e-2", 200, cot(2026, 2, 1, 18)),
                make_expense("e-3", 300, cot(2026, 2, 2, 0, 1)),
                make_expense("e-4", 400, cot(2026, 1, 31, 23, 59)),
            ]
        )

        expenses = await service.list_expenses(date(2026, 2, 1), date(2026, 2, 1))

        assert [e.id for e in expenses] == ["e-2", "e-1"]

    @pytest.mark.asyncio
    async def test_start_after_end(self, service: ExpenseService) -> None:
        with pytest.raises(ValueError):
            await service.list_expenses(date(2026, 2, 2), date(2026, 2, 1))

    @pytest.mark.asyncio
    async def test_source_failure(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
    ) -> None:
        funded.fail_methods.add("fetch_expenses_in_range")

        with pytest.raises(SourceUnavailable):
            await service.list_expenses(date(2026, 2, 1), date(2026, 2, 28))


class TestDeleteExpense:
    """delete_expense 테스트"""

    @pytest.mark.asyncio
    async def test_delete_restores_balance(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        aggregator = BalanceAggregator(funded)
        before = await aggregator.current_balances()
        record = await service.record_expense(
            "c-supplies", 30000, Channel.CASH, cot(2026, 2, 1), "detergent", admin
        )

        deleted = await service.delete_expense(record.id, admin)

        assert deleted == record
        assert funded.expenses == []
        assert (await aggregator.current_balances()).amounts == before.amounts

    @pytest.mark.asyncio
    async def test_audited(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        funded.expenses.append(make_expense("e-1", 500, cot(2026, 2, 1)))

        await service.delete_expense("e-1", admin)

        audit = funded.audit_log[-1]
        assert audit.action == AuditAction.DELETE_EXPENSE.value
        assert audit.entity_kind == "expense"
        assert audit.entity_id == "e-1"
        assert audit.actor_id == "user:admin"
        assert audit.before["amount"] == "500"
        assert audit.after is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, service: ExpenseService, admin: Actor) -> None:
        with pytest.raises(NotFound) as exc_info:
            await service.delete_expense("nope", admin)

        assert exc_info.value.details == {"expense_id": "nope"}


class TestConcepts:
    """지출 항목 관리 테스트"""

    @pytest.mark.asyncio
    async def test_create_and_list(self, service: ExpenseService) -> None:
        created = await service.create_concept("  Electricity ", "monthly bill")

        concepts = await service.list_active_concepts()

        assert created.name == "Electricity"
        assert [c.name for c in concepts] == ["Electricity", "Supplies"]

    @pytest.mark.asyncio
    async def test_create_empty_name(self, service: ExpenseService) -> None:
        with pytest.raises(EmptyConcept):
            await service.create_concept("   ")

    @pytest.mark.asyncio
    async def test_deactivate(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
    ) -> None:
        await service.deactivate_concept("c-supplies")

        assert await service.list_active_concepts() == []
        assert funded.concepts["c-supplies"].is_active is False

    @pytest.mark.asyncio
    async def test_deactivate_missing(self, service: ExpenseService) -> None:
        with pytest.raises(NotFound):
            await service.deactivate_concept("nope")

    @pytest.mark.asyncio
    async def test_update(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
        admin: Actor,
    ) -> None:
        """이름 변경 후에도 기존 지출의 항목 이름은 유지"""
        record = await service.record_expense(
            "c-supplies", 100, Channel.CASH, cot(2026, 2, 1), "", admin
        )

        updated = await service.update_concept("c-supplies", " Cleaning ", "soap")

        assert updated.name == "Cleaning"
        assert updated.description == "soap"
        assert funded.concepts["c-supplies"] == updated
        assert funded.expenses[0].concept_name == record.concept_name == "Supplies"

    @pytest.mark.asyncio
    async def test_update_empty_name(
        self,
        service: ExpenseService,
        funded: InMemoryLedgerRepository,
    ) -> None:
        with pytest.raises(EmptyConcept):
            await service.update_concept("c-supplies", "  ")

        assert "update_concept" not in funded.call_counts

    @pytest.mark.asyncio
    async def test_update_inactive(self, service: ExpenseService) -> None:
        await service.deactivate_concept("c-supplies")

        with pytest.raises(NotFound):
            await service.update_concept("c-supplies", "Cleaning")
