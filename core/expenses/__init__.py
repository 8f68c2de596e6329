"""
지출 모듈
"""

from core.expenses.service import ExpenseService

__all__ = [
    "ExpenseService",
]
