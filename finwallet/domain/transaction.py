"""
Transaction domain types
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from finwallet.domain.category import Category


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


@dataclass
class TopCategory:
    """Строка рейтинга категорий: сумма расходов и доля в процентах"""
    category: Category
    total_amount: Decimal
    percent: int = 0

    @property
    def name(self) -> str:
        return self.category.display_name
