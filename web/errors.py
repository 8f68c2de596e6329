"""
도메인 예외 → HTTP 오류 변환

호출자가 "입력 수정"(4xx)과 "재시도"(503)를 구분할 수 있도록
detail에 예외 종류와 retryable 여부를 포함.
"""

from fastapi import HTTPException

from core.domain.exceptions import (
    AlreadyExists,
    LedgerError,
    NotFound,
    SourceUnavailable,
    ValidationError,
)

# 순서 중요: 먼저 일치하는 항목 사용
_STATUS_BY_ERROR: tuple[tuple[type[LedgerError], int], ...] = (
    (ValidationError, 422),
    (AlreadyExists, 409),
    (NotFound, 404),
    (SourceUnavailable, 503),
)


def error_status(exc: LedgerError) -> int:
    """예외 종류별 HTTP 상태 코드 (알 수 없는 LedgerError는 500)"""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def to_http_exception(exc: LedgerError) -> HTTPException:
    """LedgerError를 HTTPException으로 변환"""
    return HTTPException(
        status_code=error_status(exc),
        detail={
            "error": type(exc).__name__,
            "message": exc.message,
            "retryable": exc.retryable,
            "details": exc.details,
        },
    )
