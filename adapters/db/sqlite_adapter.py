"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
문서 DB 컬렉션(초기 자본, 자본 변동, 주문, 지출, 정비)을 테이블로 보관.

주의: 금액은 Decimal 정밀도 유지를 위해 TEXT로 저장
주의: 시각은 UTC 고정 폭 문자열(to_db_ts)로 저장하여 문자열 비교로 구간 조회
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    if db_path_str != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # WAL 모드 설정
    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정 (대기 시간 초과는 어댑터 책임)
    await conn.execute("PRAGMA busy_timeout=30000")

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 전용 요청)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction() as conn:
        await conn.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        try:
            yield self._conn
            await self._conn.commit()
        except BaseException:
            await self._conn.rollback()
            raise

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # initial_capital: singleton_key UNIQUE로 "없을 때만 삽입" 보장
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS initial_capital (
            id               TEXT PRIMARY KEY,
            singleton_key    TEXT NOT NULL DEFAULT 'initial'
                             UNIQUE CHECK (singleton_key = 'initial'),
            cash             TEXT NOT NULL DEFAULT '0',
            wallet_a         TEXT NOT NULL DEFAULT '0',
            wallet_b         TEXT NOT NULL DEFAULT '0',
            ts               TEXT NOT NULL,
            created_by       TEXT NOT NULL,
            created_at       TEXT NOT NULL
        )
    """)

    # capital_movement (투입/인출)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS capital_movement (
            id               TEXT PRIMARY KEY,
            kind             TEXT NOT NULL CHECK (kind IN ('injection', 'withdrawal')),
            cash             TEXT NOT NULL DEFAULT '0',
            wallet_a         TEXT NOT NULL DEFAULT '0',
            wallet_b         TEXT NOT NULL DEFAULT '0',
            concept          TEXT NOT NULL,
            notes            TEXT,
            ts               TEXT NOT NULL,
            created_by       TEXT NOT NULL,
            created_at       TEXT NOT NULL
        )
    """)

    # orders / order_payment (주문 결제 내역)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS orders (
            order_id         TEXT PRIMARY KEY,
            client_name      TEXT NOT NULL DEFAULT '',
            plan_name        TEXT NOT NULL DEFAULT '',
            total            TEXT NOT NULL DEFAULT '0',
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS order_payment (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id         TEXT NOT NULL,
            payment_index    INTEGER NOT NULL,
            amount           TEXT NOT NULL,
            channel          TEXT NOT NULL,
            ts               TEXT NOT NULL,
            reference        TEXT,

            UNIQUE(order_id, payment_index),
            FOREIGN KEY (order_id) REFERENCES orders(order_id)
        )
    """)

    # expense_concept / expense (일반 지출)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS expense_concept (
            id               TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            description      TEXT,
            is_active        INTEGER NOT NULL DEFAULT 1,
            created_at       TEXT NOT NULL
        )
    """)

    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS expense (
            id               TEXT PRIMARY KEY,
            concept_id       TEXT NOT NULL,
            concept_name     TEXT NOT NULL,
            amount           TEXT NOT NULL,
            ts               TEXT NOT NULL,
            channel          TEXT NOT NULL,
            description      TEXT NOT NULL DEFAULT '',
            created_by       TEXT NOT NULL,
            created_at       TEXT NOT NULL
        )
    """)

    # maintenance (정비 비용, 수단 미지정 시 cash)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS maintenance (
            id               TEXT PRIMARY KEY,
            equipment_id     TEXT NOT NULL,
            failure_type     TEXT NOT NULL DEFAULT '',
            description      TEXT NOT NULL DEFAULT '',
            cost             TEXT NOT NULL DEFAULT '0',
            channel          TEXT NOT NULL DEFAULT 'cash',
            created_by       TEXT NOT NULL DEFAULT '',
            created_at       TEXT NOT NULL
        )
    """)

    # audit_log (감사 로그, append-only)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            action           TEXT NOT NULL,
            entity_kind      TEXT NOT NULL,
            entity_id        TEXT NOT NULL,
            description      TEXT NOT NULL,
            actor_id         TEXT NOT NULL,
            before_json      TEXT,
            after_json       TEXT,
            ts               TEXT NOT NULL
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_order_payment_ts
        ON order_payment(ts)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_expense_ts
        ON expense(ts)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_maintenance_created_at
        ON maintenance(created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_audit_log_entity
        ON audit_log(entity_kind, entity_id)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
