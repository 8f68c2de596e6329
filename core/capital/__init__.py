"""
자본 변경 모듈
"""

from core.capital.service import CapitalService, validate_amounts

__all__ = [
    "CapitalService",
    "validate_amounts",
]
