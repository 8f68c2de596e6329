"""
OrderStore - 주문/결제 저장소

orders / order_payment 테이블.
주문 생명주기 자체는 외부 시스템 소관이며, 여기서는 결제 기록과
원장 구성에 필요한 조회만 제공.
"""

import logging
from datetime import datetime
from decimal import Decimal

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import Order, OrderPayment, to_decimal
from core.types import Channel
from core.utils.timezone import parse_iso, to_db_ts

logger = logging.getLogger(__name__)


_PAYMENT_SELECT = """
    SELECT
        p.order_id, p.payment_index, p.amount, p.channel, p.ts, p.reference,
        o.client_name, o.plan_name
    FROM order_payment p
    JOIN orders o ON o.order_id = p.order_id
"""


class OrderStore:
    """주문/결제 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def upsert_order(
        self,
        order_id: str,
        total: Decimal,
        client_name: str = "",
        plan_name: str = "",
    ) -> None:
        """주문 등록 (이미 있으면 총액/고객 정보 갱신)"""
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO orders (order_id, client_name, plan_name, total)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(order_id) DO UPDATE SET
                    client_name = excluded.client_name,
                    plan_name = excluded.plan_name,
                    total = excluded.total
                """,
                (order_id, client_name, plan_name, str(total)),
            )

    async def add_payment(
        self,
        order_id: str,
        amount: Decimal,
        channel: Channel,
        ts: datetime,
        reference: str | None = None,
    ) -> int:
        """결제 추가 (주문 내 순번 자동 부여)

        Returns:
            부여된 결제 순번 (0부터)
        """
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT COALESCE(MAX(payment_index) + 1, 0) FROM order_payment WHERE order_id = ?",
                (order_id,),
            )
            row = await cursor.fetchone()
            index = int(row[0]) if row else 0

            await conn.execute(
                """
                INSERT INTO order_payment (order_id, payment_index, amount, channel, ts, reference)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (order_id, index, str(amount), Channel(channel).value, to_db_ts(ts), reference),
            )

        logger.debug(
            "결제 기록 완료",
            extra={"order_id": order_id, "payment_index": index, "amount": str(amount)},
        )
        return index

    async def get_order(self, order_id: str) -> Order | None:
        """주문 및 결제 내역 조회"""
        row = await self.db.fetchone(
            "SELECT order_id, total, client_name, plan_name FROM orders WHERE order_id = ?",
            (order_id,),
        )
        if row is None:
            return None

        rows = await self.db.fetchall(
            _PAYMENT_SELECT + " WHERE p.order_id = ? ORDER BY p.payment_index ASC",
            (order_id,),
        )
        return Order(
            id=row[0],
            total=to_decimal(row[1]),
            client_name=row[2],
            plan_name=row[3],
            payments=tuple(self._row_to_payment(r) for r in rows),
        )

    async def fetch_payments_in_range(
        self,
        start: datetime | None,
        end: datetime | None,
    ) -> list[OrderPayment]:
        """결제 시각 기준 조회 (닫힌 구간, None이면 열린 경계)"""
        sql = _PAYMENT_SELECT + " WHERE 1 = 1"
        params: list[str] = []

        if start is not None:
            sql += " AND p.ts >= ?"
            params.append(to_db_ts(start))
        if end is not None:
            sql += " AND p.ts <= ?"
            params.append(to_db_ts(end))

        sql += " ORDER BY p.ts ASC, p.order_id ASC, p.payment_index ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [self._row_to_payment(row) for row in rows]

    @staticmethod
    def _row_to_payment(row: tuple) -> OrderPayment:
        return OrderPayment(
            order_id=row[0],
            index=int(row[1]),
            amount=to_decimal(row[2]),
            channel=Channel(row[3]),
            ts=parse_iso(row[4]),
            reference=row[5],
            client_name=row[6] or None,
            plan_name=row[7] or None,
        )
