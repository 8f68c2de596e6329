"""
CapitalStore - 자본 기록 저장소

initial_capital / capital_movement 테이블을 읽고 쓰는 클래스.
ICapitalRepository Protocol 구현.

초기 자본은 singleton_key UNIQUE 제약으로 조건부 삽입되므로
동시 요청이 경합해도 최대 1건만 저장됨.
"""

import logging
import sqlite3

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.exceptions import AlreadyExists
from core.domain.models import CapitalMovement, ChannelAmounts, InitialCapital
from core.types import MovementKind
from core.utils.timezone import parse_iso, to_db_ts

logger = logging.getLogger(__name__)


_MOVEMENT_COLUMNS = """
    id, kind, cash, wallet_a, wallet_b, concept, notes, ts, created_by, created_at
"""


class CapitalStore:
    """자본 기록 저장소

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        store = CapitalStore(db)

        await store.insert_initial_capital(record)
        movements = await store.fetch_all_movements()
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 초기 자본
    # -------------------------------------------------------------------------

    async def fetch_initial_capital(self) -> InitialCapital | None:
        """초기 자본 조회 (없으면 None)"""
        row = await self.db.fetchone(
            """
            SELECT id, cash, wallet_a, wallet_b, ts, created_by, created_at
            FROM initial_capital
            WHERE singleton_key = 'initial'
            """
        )
        if row is None:
            return None

        return InitialCapital(
            id=row[0],
            amounts=ChannelAmounts.from_mapping(
                {"cash": row[1], "wallet_a": row[2], "wallet_b": row[3]}
            ),
            ts=parse_iso(row[4]),
            created_by=row[5],
            created_at=parse_iso(row[6]),
        )

    async def insert_initial_capital(self, record: InitialCapital) -> None:
        """초기 자본 저장

        Raises:
            AlreadyExists: 이미 초기 자본이 존재하는 경우 (UNIQUE 위반)
        """
        try:
            async with self.db.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO initial_capital (
                        id, cash, wallet_a, wallet_b, ts, created_by, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.id,
                        str(record.amounts.cash),
                        str(record.amounts.wallet_a),
                        str(record.amounts.wallet_b),
                        to_db_ts(record.ts),
                        record.created_by,
                        to_db_ts(record.created_at),
                    ),
                )
        except sqlite3.IntegrityError as e:
            logger.warning(
                "초기 자본 중복 등록 시도",
                extra={"capital_id": record.id, "error": str(e)},
            )
            raise AlreadyExists(
                "초기 자본이 이미 등록되어 있습니다",
                {"capital_id": record.id},
            ) from e

        logger.debug("초기 자본 저장 완료", extra={"capital_id": record.id})

    # -------------------------------------------------------------------------
    # 자본 변동
    # -------------------------------------------------------------------------

    async def insert_movement(self, record: CapitalMovement) -> None:
        """자본 변동 저장"""
        async with self.db.transaction() as conn:
            await conn.execute(
                f"""
                INSERT INTO capital_movement ({_MOVEMENT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.kind.value,
                    str(record.amounts.cash),
                    str(record.amounts.wallet_a),
                    str(record.amounts.wallet_b),
                    record.concept,
                    record.notes,
                    to_db_ts(record.ts),
                    record.created_by,
                    to_db_ts(record.created_at),
                ),
            )

        logger.debug(
            "자본 변동 저장 완료",
            extra={"movement_id": record.id, "kind": record.kind.value},
        )

    async def get_movement(self, movement_id: str) -> CapitalMovement | None:
        """ID로 자본 변동 조회"""
        row = await self.db.fetchone(
            f"SELECT {_MOVEMENT_COLUMNS} FROM capital_movement WHERE id = ?",
            (movement_id,),
        )
        if row is None:
            return None
        return self._row_to_movement(row)

    async def fetch_all_movements(self) -> list[CapitalMovement]:
        """모든 자본 변동 조회 (ts 오름차순)"""
        rows = await self.db.fetchall(
            f"SELECT {_MOVEMENT_COLUMNS} FROM capital_movement ORDER BY ts ASC, id ASC"
        )
        return [self._row_to_movement(row) for row in rows]

    async def delete_movement(self, movement_id: str) -> bool:
        """자본 변동 삭제

        Returns:
            True: 삭제됨, False: 대상 없음
        """
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM capital_movement WHERE id = ?",
                (movement_id,),
            )
            deleted = cursor.rowcount > 0

        return deleted

    # -------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_movement(row: tuple) -> CapitalMovement:
        return CapitalMovement(
            id=row[0],
            kind=MovementKind(row[1]),
            amounts=ChannelAmounts.from_mapping(
                {"cash": row[2], "wallet_a": row[3], "wallet_b": row[4]}
            ),
            concept=row[5],
            notes=row[6],
            ts=parse_iso(row[7]),
            created_by=row[8],
            created_at=parse_iso(row[9]),
        )
