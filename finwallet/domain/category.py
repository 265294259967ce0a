"""
Expense/income categories - closed set, no user-defined categories.
"""
from enum import Enum


class Category(str, Enum):
    HOUSING = "HOUSING"              # rent, mortgage, bills
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    UTILITIES = "UTILITIES"
    CLOTHING = "CLOTHING"
    ENTERTAINMENT = "ENTERTAINMENT"
    TRAVEL = "TRAVEL"
    EDUCATION = "EDUCATION"
    LOANS = "LOANS"
    SAVINGS = "SAVINGS"              # savings and investments
    HEALTH = "HEALTH"
    FAMILY = "FAMILY"                # children and family
    GIFTS = "GIFTS"                  # gifts and charity
    HOME = "HOME"                    # home and repairs
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        """FOOD -> "Food" """
        return self.value[:1] + self.value[1:].lower()


def parse_category(value: str) -> Category:
    from finwallet.domain.errors import ValidationError

    try:
        return Category(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Неизвестная категория: {value}") from None
