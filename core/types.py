"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum


class AppMode(str, Enum):
    """운영 모드 (실운영 / 데모)"""

    PRODUCTION = "production"
    DEMO = "demo"


class Channel(str, Enum):
    """결제 수단 (잔액 추적 단위)

    정확히 세 가지만 존재 (닫힌 집합).
    선언 순서가 곧 기본 선택 우선순위.
    """

    CASH = "cash"  # 현금 (efectivo)
    WALLET_A = "wallet_a"  # 모바일 지갑 A (nequi)
    WALLET_B = "wallet_b"  # 모바일 지갑 B (daviplata)

    @classmethod
    def ordered(cls) -> tuple["Channel", ...]:
        """고정 우선순위 순서 (cash, wallet_a, wallet_b)"""
        return (cls.CASH, cls.WALLET_A, cls.WALLET_B)


class MovementKind(str, Enum):
    """자본 변동 종류"""

    INJECTION = "injection"  # 자본 투입
    WITHDRAWAL = "withdrawal"  # 자본 인출


class EntryKind(str, Enum):
    """Ledger 항목 방향"""

    INCOME = "income"
    EXPENSE = "expense"


class EntrySource(str, Enum):
    """Ledger 항목 출처"""

    INITIAL_CAPITAL = "initial_capital"
    CAPITAL_MOVEMENT = "capital_movement"
    ORDER_PAYMENT = "order_payment"
    EXPENSE = "expense"
    MAINTENANCE = "maintenance"


class ActorKind(str, Enum):
    """행위자 종류"""

    USER = "USER"


class AuditAction(str, Enum):
    """감사 로그 액션"""

    CREATE_INITIAL_CAPITAL = "create_initial_capital"
    CREATE_CAPITAL_MOVEMENT = "create_capital_movement"
    DELETE_CAPITAL_MOVEMENT = "delete_capital_movement"
    CREATE_EXPENSE = "create_expense"
    DELETE_EXPENSE = "delete_expense"


@dataclass(frozen=True)
class Actor:
    """행위자 (불변)

    변경 작업의 작성자를 식별.
    세션 전역 상태 대신 호출마다 명시적으로 전달.
    """

    kind: str
    id: str

    @classmethod
    def user(cls, user_id: str) -> "Actor":
        """사용자 Actor 생성"""
        return cls(kind=ActorKind.USER.value, id=f"user:{user_id}")
