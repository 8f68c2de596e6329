"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.

저장소(문서 DB)는 외부 협력자이며, 코어는 아래 읽기/쓰기 연산만 사용.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from core.domain.models import (
    CapitalMovement,
    Expense,
    ExpenseConcept,
    InitialCapital,
    MaintenanceExpense,
    OrderPayment,
)


@runtime_checkable
class IEventSource(Protocol):
    """원장 이벤트 소스 인터페이스

    구간 인자(start, end)는 닫힌 구간이며 None이면 열린 경계.
    각 호출은 대기/실패가 발생할 수 있는 비동기 경계.
    """

    async def fetch_initial_capital(self) -> InitialCapital | None:
        """초기 자본 조회 (최대 1건)"""
        ...

    async def fetch_all_movements(self) -> list[CapitalMovement]:
        """모든 자본 변동 조회 (투입/인출)"""
        ...

    async def fetch_payments_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[OrderPayment]:
        """결제 시각 기준 주문 결제 조회 (주문/고객 컨텍스트 포함)"""
        ...

    async def fetch_expenses_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Expense]:
        """지출일 기준 일반 지출 조회"""
        ...

    async def fetch_maintenance_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[MaintenanceExpense]:
        """생성 시각 기준 정비 비용 조회 (완료 시각 아님)"""
        ...


@runtime_checkable
class ICapitalRepository(Protocol):
    """자본 기록 저장소 인터페이스"""

    async def fetch_initial_capital(self) -> InitialCapital | None:
        ...

    async def insert_initial_capital(self, record: InitialCapital) -> None:
        """초기 자본 저장 (조건부 삽입)

        Raises:
            AlreadyExists: 이미 초기 자본이 존재하는 경우
        """
        ...

    async def insert_movement(self, record: CapitalMovement) -> None:
        ...

    async def get_movement(self, movement_id: str) -> CapitalMovement | None:
        ...

    async def delete_movement(self, movement_id: str) -> bool:
        """자본 변동 삭제

        Returns:
            True: 삭제됨, False: 대상 없음
        """
        ...


@runtime_checkable
class IExpenseRepository(Protocol):
    """지출 저장소 인터페이스"""

    async def insert_expense(self, record: Expense) -> None:
        ...

    async def fetch_expenses_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Expense]:
        ...

    async def get_expense(self, expense_id: str) -> Expense | None:
        ...

    async def delete_expense(self, expense_id: str) -> bool:
        """지출 삭제

        Returns:
            True: 삭제됨, False: 대상 없음
        """
        ...

    async def get_concept(self, concept_id: str) -> ExpenseConcept | None:
        ...

    async def insert_concept(self, record: ExpenseConcept) -> None:
        ...

    async def update_concept(
        self,
        concept_id: str,
        name: str,
        description: str | None,
    ) -> bool:
        """지출 항목 이름/설명 수정 (활성 항목만)"""
        ...

    async def list_active_concepts(self) -> list[ExpenseConcept]:
        ...

    async def deactivate_concept(self, concept_id: str) -> bool:
        ...


@runtime_checkable
class IAuditStore(Protocol):
    """감사 로그 저장소 인터페이스"""

    async def log(
        self,
        action: str,
        entity_kind: str,
        entity_id: str,
        description: str,
        actor_id: str,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> None:
        ...
