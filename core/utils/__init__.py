"""
유틸리티 패키지

타임존 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    COT,
    to_cot,
    format_cot,
    time_of_day,
    now_utc,
    ensure_utc,
    day_bounds,
    parse_iso,
    to_db_ts,
)

__all__ = [
    "COT",
    "to_cot",
    "format_cot",
    "time_of_day",
    "now_utc",
    "ensure_utc",
    "day_bounds",
    "parse_iso",
    "to_db_ts",
]
