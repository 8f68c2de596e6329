"""
도메인 예외

호출자가 "입력 수정 필요(아무것도 바뀌지 않음)"와
"데이터 로드 실패(재시도)"를 구분할 수 있도록 분류.

    LedgerError
    ├── ValidationError
    │   ├── InvalidAmounts
    │   ├── EmptyConcept
    │   ├── NonPositiveAmount
    │   └── InsufficientBalance
    ├── AlreadyExists
    ├── NotFound
    └── SourceUnavailable
"""

from typing import Any


class LedgerError(Exception):
    """자본/원장 도메인 예외 기반 클래스"""

    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(LedgerError):
    """입력 검증 실패

    쓰기 전에 발생하며 저장 상태는 변경되지 않음.
    """
    pass


class InvalidAmounts(ValidationError):
    """결제 수단별 금액이 모두 0이거나 음수 포함"""
    pass


class EmptyConcept(ValidationError):
    """자본 변동 사유(concept)가 비어 있음"""
    pass


class NonPositiveAmount(ValidationError, ValueError):
    """0 이하 금액 (Solvency Gate 사전조건 위반)"""

    def __init__(self, amount: Any):
        super().__init__(
            f"금액은 0보다 커야 합니다: {amount}",
            {"amount": str(amount)},
        )


class InsufficientBalance(ValidationError):
    """선택한 결제 수단 잔액 부족"""
    pass


class AlreadyExists(LedgerError):
    """초기 자본이 이미 등록됨"""
    pass


class NotFound(LedgerError):
    """대상 레코드 없음"""
    pass


class SourceUnavailable(LedgerError):
    """이벤트 소스 조회 실패

    원인 예외는 __cause__로 연결됨.
    """

    retryable = True
