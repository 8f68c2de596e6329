"""
ExpenseStore - 지출 저장소

expense_concept / expense / maintenance 테이블.
IExpenseRepository Protocol 구현.

지출 항목(concept)은 물리 삭제하지 않고 is_active=0으로 비활성화.
"""

import logging
from datetime import datetime

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Expense, ExpenseConcept, MaintenanceExpense, to_decimal
from core.types import Channel
from core.utils.timezone import parse_iso, to_db_ts

logger = logging.getLogger(__name__)


def _range_clause(column: str, start: datetime | None, end: datetime | None) -> tuple[str, list[str]]:
    """닫힌 구간 WHERE 절 생성 (None이면 해당 경계 생략)"""
    clause = " WHERE 1 = 1"
    params: list[str] = []
    if start is not None:
        clause += f" AND {column} >= ?"
        params.append(to_db_ts(start))
    if end is not None:
        clause += f" AND {column} <= ?"
        params.append(to_db_ts(end))
    return clause, params


class ExpenseStore:
    """지출 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 일반 지출
    # -------------------------------------------------------------------------

    async def insert_expense(self, record: Expense) -> None:
        """지출 저장"""
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO expense (
                    id, concept_id, concept_name, amount, ts, channel,
                    description, created_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.concept_id,
                    record.concept_name,
                    str(record.amount),
                    to_db_ts(record.ts),
                    record.channel.value,
                    record.description,
                    record.created_by,
                    to_db_ts(record.created_at),
                ),
            )

        logger.debug(
            "지출 저장 완료",
            extra={"expense_id": record.id, "amount": str(record.amount)},
        )

    async def fetch_expenses_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Expense]:
        """지출일 기준 조회"""
        where, params = _range_clause("ts", start, end)
        rows = await self.db.fetchall(
            """
            SELECT id, concept_id, concept_name, amount, ts, channel,
                   description, created_by, created_at
            FROM expense
            """
            + where
            + " ORDER BY ts ASC, id ASC",
            tuple(params),
        )
        return [self._row_to_expense(row) for row in rows]

    async def get_expense(self, expense_id: str) -> Expense | None:
        """ID로 지출 조회"""
        row = await self.db.fetchone(
            """
            SELECT id, concept_id, concept_name, amount, ts, channel,
                   description, created_by, created_at
            FROM expense
            WHERE id = ?
            """,
            (expense_id,),
        )
        if row is None:
            return None
        return self._row_to_expense(row)

    async def delete_expense(self, expense_id: str) -> bool:
        """지출 삭제 (관리자 정정용 물리 삭제)

        Returns:
            True: 삭제됨, False: 대상 없음
        """
        async with self.db.transaction() as conn:
            cursor = await conn.execute("DELETE FROM expense WHERE id = ?", (expense_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.debug("지출 삭제 완료", extra={"expense_id": expense_id})
        return deleted

    # -------------------------------------------------------------------------
    # 지출 항목
    # -------------------------------------------------------------------------

    async def insert_concept(self, record: ExpenseConcept) -> None:
        """지출 항목 저장"""
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO expense_concept (id, name, description, is_active, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.name,
                    record.description,
                    1 if record.is_active else 0,
                    to_db_ts(record.created_at),
                ),
            )

    async def get_concept(self, concept_id: str) -> ExpenseConcept | None:
        """ID로 지출 항목 조회 (비활성 포함)"""
        row = await self.db.fetchone(
            """
            SELECT id, name, description, is_active, created_at
            FROM expense_concept
            WHERE id = ?
            """,
            (concept_id,),
        )
        if row is None:
            return None
        return self._row_to_concept(row)

    async def update_concept(
        self,
        concept_id: str,
        name: str,
        description: str | None,
    ) -> bool:
        """지출 항목 이름/설명 수정

        기존 지출의 concept_name은 등록 시점 값을 유지.

        Returns:
            True: 수정됨, False: 대상 없음 또는 비활성
        """
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE expense_concept SET name = ?, description = ?
                WHERE id = ? AND is_active = 1
                """,
                (name, description, concept_id),
            )
            changed = cursor.rowcount > 0

        return changed

    async def list_active_concepts(self) -> list[ExpenseConcept]:
        """활성 지출 항목 목록 (이름순)"""
        rows = await self.db.fetchall(
            """
            SELECT id, name, description, is_active, created_at
            FROM expense_concept
            WHERE is_active = 1
            ORDER BY name ASC
            """
        )
        return [self._row_to_concept(row) for row in rows]

    async def deactivate_concept(self, concept_id: str) -> bool:
        """지출 항목 비활성화 (soft delete)

        Returns:
            True: 비활성화됨, False: 대상 없음 또는 이미 비활성
        """
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                "UPDATE expense_concept SET is_active = 0 WHERE id = ? AND is_active = 1",
                (concept_id,),
            )
            changed = cursor.rowcount > 0

        return changed

    # -------------------------------------------------------------------------
    # 정비 비용
    # -------------------------------------------------------------------------

    async def insert_maintenance(self, record: MaintenanceExpense) -> None:
        """정비 비용 저장"""
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO maintenance (
                    id, equipment_id, failure_type, description, cost,
                    channel, created_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.equipment_id,
                    record.failure_type,
                    record.description,
                    str(record.cost),
                    record.channel.value,
                    record.created_by,
                    to_db_ts(record.created_at),
                ),
            )

    async def fetch_maintenance_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[MaintenanceExpense]:
        """생성 시각 기준 정비 비용 조회"""
        where, params = _range_clause("created_at", start, end)
        rows = await self.db.fetchall(
            """
            SELECT id, equipment_id, failure_type, description, cost,
                   channel, created_by, created_at
            FROM maintenance
            """
            + where
            + " ORDER BY created_at ASC, id ASC",
            tuple(params),
        )
        return [
            MaintenanceExpense(
                id=row[0],
                equipment_id=row[1],
                failure_type=row[2],
                description=row[3],
                cost=to_decimal(row[4]),
                # 수단 미지정 기록은 현금으로 간주
                channel=Channel(row[5] or Channel.CASH.value),
                created_by=row[6],
                created_at=parse_iso(row[7]),
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_expense(row: tuple) -> Expense:
        return Expense(
            id=row[0],
            concept_id=row[1],
            concept_name=row[2],
            amount=to_decimal(row[3]),
            ts=parse_iso(row[4]),
            channel=Channel(row[5]),
            description=row[6],
            created_by=row[7],
            created_at=parse_iso(row[8]),
        )

    @staticmethod
    def _row_to_concept(row: tuple) -> ExpenseConcept:
        return ExpenseConcept(
            id=row[0],
            name=row[1],
            description=row[2],
            is_active=bool(row[3]),
            created_at=parse_iso(row[4]),
        )
