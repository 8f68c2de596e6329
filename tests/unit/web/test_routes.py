"""
Web API 라우트 테스트

dependency_overrides로 인메모리 저장소를 주입하여 HTTP 계층 검증.
"""

import pytest
from fastapi.testclient import TestClient

from adapters.mock.ledger_repository import InMemoryLedgerRepository
from core.capital.service import CapitalService
from core.config.loader import Settings
from core.expenses.service import ExpenseService
from core.ledger.aggregator import BalanceAggregator
from core.types import Channel, MovementKind
from tests.utils.helpers import (
    cot,
    make_concept,
    make_expense,
    make_initial_capital,
    make_movement,
)
from web.app import app
from web.dependencies import (
    get_app_settings,
    get_capital_service,
    get_event_source,
    get_expense_query_service,
    get_expense_service,
    get_payment_markers,
)


@pytest.fixture
def client(
    repo: InMemoryLedgerRepository,
    temp_settings_file,
) -> TestClient:
    """인메모리 저장소가 주입된 TestClient (lifespan 미실행)"""
    app.dependency_overrides[get_event_source] = lambda: repo
    app.dependency_overrides[get_capital_service] = lambda: CapitalService(repo, repo)
    app.dependency_overrides[get_expense_service] = lambda: ExpenseService(
        repo, BalanceAggregator(repo), repo
    )
    app.dependency_overrides[get_expense_query_service] = lambda: ExpenseService(
        repo, BalanceAggregator(repo)
    )
    app.dependency_overrides[get_payment_markers] = lambda: ("pedido", "abono")
    app.dependency_overrides[get_app_settings] = lambda: Settings(temp_settings_file)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def scenario(repo: InMemoryLedgerRepository) -> InMemoryLedgerRepository:
    """cash 70000, wallet_a 50000, wallet_b 0"""
    repo.initial_capital = make_initial_capital(cash=100000)
    repo.movements["m-1"] = make_movement(
        "m-1", MovementKind.INJECTION, cot(2026, 1, 2), wallet_a=50000
    )
    concept = make_concept()
    repo.concepts[concept.id] = concept
    repo.expenses.append(make_expense("e-1", 30000, cot(2026, 1, 3), Channel.CASH, concept))
    return repo


class TestHealth:
    """GET /health"""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "mode": "demo", "version": "1.0.0"}


class TestCapitalRoutes:
    """/api/capital"""

    def test_balances(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        data = client.get("/api/capital/balances").json()

        assert data["cash"] == "70000"
        assert data["wallet_a"] == "50000"
        assert data["wallet_b"] == "0"
        assert data["total"] == "120000"
        assert data["degraded"] is False

    def test_balances_degraded_is_not_error(
        self,
        client: TestClient,
        repo: InMemoryLedgerRepository,
    ) -> None:
        repo.should_fail = True

        response = client.get("/api/capital/balances")

        assert response.status_code == 200
        assert response.json()["degraded"] is True
        assert response.json()["warning"]

    def test_initial_capital_flow(
        self,
        client: TestClient,
        repo: InMemoryLedgerRepository,
    ) -> None:
        assert client.get("/api/capital/initial").status_code == 404

        response = client.post(
            "/api/capital/initial",
            json={"cash": "100000", "wallet_a": "2500", "author": "admin"},
        )
        assert response.status_code == 201
        assert response.json()["total"] == "102500"
        assert response.json()["created_by"] == "user:admin"

        again = client.post("/api/capital/initial", json={"cash": "5", "author": "admin"})
        assert again.status_code == 409
        assert again.json()["detail"]["error"] == "AlreadyExists"

        fetched = client.get("/api/capital/initial").json()
        assert fetched["amounts"]["cash"] == "100000"

    def test_initial_capital_all_zero(self, client: TestClient) -> None:
        response = client.post("/api/capital/initial", json={"author": "admin"})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "InvalidAmounts"

    def test_initial_capital_source_failure(
        self,
        client: TestClient,
        repo: InMemoryLedgerRepository,
    ) -> None:
        repo.should_fail = True

        response = client.get("/api/capital/initial")

        assert response.status_code == 503
        assert response.json()["detail"]["retryable"] is True

    def test_movement_create_list_delete(
        self,
        client: TestClient,
        repo: InMemoryLedgerRepository,
    ) -> None:
        created = client.post(
            "/api/capital/movements",
            json={
                "kind": "injection",
                "wallet_a": "50000",
                "concept": "loan",
                "author": "admin",
                "ts": "2026-02-01T12:00:00-05:00",
            },
        )
        assert created.status_code == 201
        movement_id = created.json()["id"]

        listed = client.get("/api/capital/movements").json()
        assert [m["id"] for m in listed] == [movement_id]
        assert listed[0]["amounts"]["wallet_a"] == "50000"

        deleted = client.delete(f"/api/capital/movements/{movement_id}", params={"author": "admin"})
        assert deleted.status_code == 200
        assert repo.movements == {}

        missing = client.delete(f"/api/capital/movements/{movement_id}", params={"author": "admin"})
        assert missing.status_code == 404

    def test_movement_empty_concept(self, client: TestClient) -> None:
        response = client.post(
            "/api/capital/movements",
            json={"kind": "withdrawal", "cash": "10", "concept": "  ", "author": "admin"},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "EmptyConcept"

    def test_movement_invalid_kind(self, client: TestClient) -> None:
        response = client.post(
            "/api/capital/movements",
            json={"kind": "transfer", "cash": "10", "concept": "x", "author": "admin"},
        )

        assert response.status_code == 422


class TestLedgerRoutes:
    """/api/ledger"""

    def test_ledger(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        scenario.movements["echo"] = make_movement(
            "echo", MovementKind.INJECTION, cot(2026, 1, 4), cash=999, concept="Abono pedido 12"
        )

        response = client.get("/api/ledger", params={"start": "2026-01-01", "end": "2026-01-31"})

        assert response.status_code == 200
        data = response.json()
        assert [e["entry_id"] for e in data["entries"]] == [
            "capital-initial-cap-1",
            "movement-m-1",
            "expense-e-1",
        ]
        assert data["entries"][-1]["balance_total"] == "120000"
        assert data["summary"]["entry_count"] == 3

    def test_ledger_start_after_end(self, client: TestClient) -> None:
        response = client.get("/api/ledger", params={"start": "2026-02-01", "end": "2026-01-01"})

        assert response.status_code == 422

    def test_ledger_source_failure(
        self,
        client: TestClient,
        repo: InMemoryLedgerRepository,
    ) -> None:
        repo.fail_methods.add("fetch_expenses_in_range")

        response = client.get("/api/ledger", params={"start": "2026-01-01", "end": "2026-01-31"})

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "SourceUnavailable"

    def test_channel_history(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        response = client.get("/api/ledger/channels/wallet_a")

        assert response.status_code == 200
        data = response.json()
        assert data["channel"] == "wallet_a"
        assert [m["movement_id"] for m in data["movements"]] == ["movement-m-1"]
        assert data["balance"] == "50000"

    def test_channel_history_until_end(
        self,
        client: TestClient,
        scenario: InMemoryLedgerRepository,
    ) -> None:
        """종료일까지의 잔액"""
        response = client.get("/api/ledger/channels/cash", params={"end": "2026-01-02"})

        assert response.json()["balance"] == "100000"

    def test_unknown_channel(self, client: TestClient) -> None:
        assert client.get("/api/ledger/channels/bitcoin").status_code == 422


class TestSolvencyRoutes:
    """/api/solvency"""

    def test_check(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        data = client.get(
            "/api/solvency/check", params={"amount": "80000", "channel": "cash"}
        ).json()

        assert data["admissible"] is False
        assert data["balance"] == "70000"

    def test_channels(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        data = client.get("/api/solvency/channels", params={"amount": "40000"}).json()

        assert data["channels"] == ["cash", "wallet_a"]

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_non_positive(self, client: TestClient, amount: str) -> None:
        response = client.get("/api/solvency/channels", params={"amount": amount})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "NonPositiveAmount"


class TestExpenseRoutes:
    """/api/expenses"""

    def test_record(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        response = client.post(
            "/api/expenses",
            json={
                "concept_id": "c-supplies",
                "amount": "40000",
                "channel": "wallet_a",
                "author": "admin",
            },
        )

        assert response.status_code == 201
        assert response.json()["concept_name"] == "Supplies"
        assert len(scenario.expenses) == 2

    def test_insufficient(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        response = client.post(
            "/api/expenses",
            json={
                "concept_id": "c-supplies",
                "amount": "60000",
                "channel": "wallet_a",
                "author": "admin",
            },
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "InsufficientBalance"
        assert detail["details"]["available_channels"] == ["cash"]
        assert len(scenario.expenses) == 1

    def test_degraded(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        scenario.fail_methods.add("fetch_payments_in_range")

        response = client.post(
            "/api/expenses",
            json={"concept_id": "c-supplies", "amount": "1", "channel": "cash", "author": "admin"},
        )

        assert response.status_code == 503

    def test_concepts(self, client: TestClient, repo: InMemoryLedgerRepository) -> None:
        created = client.post("/api/expenses/concepts", json={"name": "Water"})
        assert created.status_code == 201
        concept_id = created.json()["id"]

        assert [c["name"] for c in client.get("/api/expenses/concepts").json()] == ["Water"]

        assert client.delete(f"/api/expenses/concepts/{concept_id}").status_code == 200
        assert client.get("/api/expenses/concepts").json() == []
        assert client.delete(f"/api/expenses/concepts/{concept_id}").status_code == 404

    def test_concept_empty_name(self, client: TestClient) -> None:
        response = client.post("/api/expenses/concepts", json={"name": " "})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "EmptyConcept"

    def test_concept_update(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        response = client.put(
            "/api/expenses/concepts/c-supplies",
            json={"name": "Cleaning", "description": "soap"},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Cleaning"
        assert scenario.expenses[0].concept_name == "Supplies"

        missing = client.put("/api/expenses/concepts/nope", json={"name": "x"})
        assert missing.status_code == 404

    def test_list_expenses(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        scenario.expenses.append(make_expense("e-2", 500, cot(2026, 1, 5), Channel.WALLET_A))

        response = client.get("/api/expenses", params={"start": "2026-01-01", "end": "2026-01-31"})

        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data] == ["e-2", "e-1"]
        assert data[0]["amount"] == "500"
        assert data[0]["channel"] == "wallet_a"

    def test_list_expenses_start_after_end(self, client: TestClient) -> None:
        response = client.get("/api/expenses", params={"start": "2026-02-01", "end": "2026-01-01"})

        assert response.status_code == 422

    def test_delete_expense(self, client: TestClient, scenario: InMemoryLedgerRepository) -> None:
        response = client.delete("/api/expenses/e-1", params={"author": "admin"})

        assert response.status_code == 200
        assert response.json()["id"] == "e-1"
        assert scenario.expenses == []
        assert scenario.audit_log[-1].action == "delete_expense"

        balances = client.get("/api/capital/balances").json()
        assert balances["cash"] == "100000"

        missing = client.delete("/api/expenses/e-1", params={"author": "admin"})
        assert missing.status_code == 404
        assert missing.json()["detail"]["error"] == "NotFound"
