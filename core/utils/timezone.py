"""
타임존 유틸리티

내부 저장: UTC | 영업일/표시: 콜롬비아 시간(COT, UTC-5) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import date, datetime, time, timedelta, timezone

from core.constants import Defaults

# COT 타임존 (UTC-5, 서머타임 없음)
COT = timezone(timedelta(hours=-5))


def to_cot(dt: datetime) -> datetime:
    """UTC datetime을 COT로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)

    Returns:
        COT 타임존의 datetime

    Example:
        >>> utc_dt = datetime(2026, 2, 20, 3, 0, 0, tzinfo=timezone.utc)
        >>> to_cot(utc_dt).day
        19  # 전날 22:00
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(COT)


def format_cot(dt: datetime, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """UTC datetime을 COT 문자열로 포맷

    Args:
        dt: datetime 객체 (UTC 권장)
        fmt: strftime 포맷 문자열

    Returns:
        COT 시간의 포맷된 문자열
    """
    return to_cot(dt).strftime(fmt)


def time_of_day(dt: datetime) -> str:
    """원장 정렬 보조키용 시각 문자열 (COT 기준 HH:MM)"""
    return format_cot(dt, Defaults.TIME_OF_DAY_FORMAT)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하고 UTC로 정규화"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_bounds(start: date | datetime, end: date | datetime) -> tuple[datetime, datetime]:
    """영업일 구간 → UTC 닫힌 구간

    시작일 00:00:00.000000 ~ 종료일 23:59:59.999999 (COT 기준).
    datetime이 들어오면 COT 기준 날짜만 사용.

    Args:
        start: 시작일
        end: 종료일 (포함)

    Returns:
        (구간 시작 UTC, 구간 끝 UTC)

    Raises:
        ValueError: 시작일이 종료일보다 늦은 경우
    """
    start_day = to_cot(start).date() if isinstance(start, datetime) else start
    end_day = to_cot(end).date() if isinstance(end, datetime) else end

    if start_day > end_day:
        raise ValueError(f"시작일이 종료일보다 늦습니다: {start_day} > {end_day}")

    lower = datetime.combine(start_day, time.min, tzinfo=COT)
    upper = datetime.combine(end_day, time.max, tzinfo=COT)
    return lower.astimezone(timezone.utc), upper.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """DB에 저장된 ISO 8601 문자열을 UTC datetime으로 변환"""
    return ensure_utc(datetime.fromisoformat(value))


def to_db_ts(dt: datetime) -> str:
    """DB 저장용 UTC 고정 폭 문자열 (문자열 비교 = 시각 비교)"""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")
