"""
AuditStore - 감사 로그 저장소

audit_log 테이블 (append-only).
자본 생성/삭제 등 관리 작업의 이전/이후 상태를 JSON으로 보관.
"""

import json
import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.utils.timezone import now_utc, to_db_ts

logger = logging.getLogger(__name__)


class AuditStore:
    """감사 로그 저장소

    IAuditStore Protocol 구현.

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

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
        """감사 로그 기록"""
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO audit_log (
                    action, entity_kind, entity_id, description, actor_id,
                    before_json, after_json, ts
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    action,
                    entity_kind,
                    entity_id,
                    description,
                    actor_id,
                    json.dumps(before, ensure_ascii=False) if before is not None else None,
                    json.dumps(after, ensure_ascii=False) if after is not None else None,
                    to_db_ts(now_utc()),
                ),
            )

    async def get_by_entity(self, entity_kind: str, entity_id: str) -> list[dict[str, Any]]:
        """엔티티별 감사 로그 조회 (기록 순)"""
        rows = await self.db.fetchall(
            """
            SELECT seq, action, entity_kind, entity_id, description, actor_id,
                   before_json, after_json, ts
            FROM audit_log
            WHERE entity_kind = ? AND entity_id = ?
            ORDER BY seq ASC
            """,
            (entity_kind, entity_id),
        )
        return [
            {
                "seq": row[0],
                "action": row[1],
                "entity_kind": row[2],
                "entity_id": row[3],
                "description": row[4],
                "actor_id": row[5],
                "before": json.loads(row[6]) if row[6] else None,
                "after": json.loads(row[7]) if row[7] else None,
                "ts": row[8],
            }
            for row in rows
        ]
