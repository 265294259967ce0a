"""
CategoryAggregator: expense analytics over calendar-month windows.

- month_transactions: операции кошелька за [начало месяца, начало следующего)
- category_totals: расходы по категориям (разреженно: нулевых категорий нет)
- top_categories: рейтинг за всё время + доли от суммы топ-N
- expense_history_by_day: расходы по дням месяца (плотно: каждый день есть)

Все методы только читают; для согласованного среза вызывайте их на одной
сессии (одной транзакции БД).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from finwallet.config import get_settings
from finwallet.domain.category import Category
from finwallet.domain.errors import NotFoundError
from finwallet.domain.money import ZERO, total, percent_of, distribute_percents
from finwallet.domain.periods import YearMonth, day_label
from finwallet.domain.transaction import TopCategory, TransactionType
from finwallet.infrastructure.db.models import TransactionModel
from finwallet.infrastructure.db.repositories import TransactionRepository, WalletRepository


@dataclass(frozen=True)
class CategoryShare:
    """Категория месяца: сумма и целый процент от всех расходов месяца"""
    category: Category
    amount: Decimal
    percent: int

    @property
    def name(self) -> str:
        return self.category.value


class CategoryAggregator:
    """Build per-category expense analytics for one wallet."""

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.wallets = WalletRepository(db)

    def _ensure_wallet(self, wallet_id: int) -> None:
        if self.wallets.get(wallet_id) is None:
            raise NotFoundError(f"Кошелёк #{wallet_id} не найден")

    # ------------------------------------------------------------------
    # Month window
    # ------------------------------------------------------------------

    def month_transactions(self, wallet_id: int, month: Optional[YearMonth] = None) -> List[TransactionModel]:
        """All transactions of the month, most recent first."""
        self._ensure_wallet(wallet_id)
        month = month or YearMonth.current()
        return self.transactions.list_by_wallet(wallet_id, month.start, month.end)

    def month_expense_transactions(self, wallet_id: int, month: Optional[YearMonth] = None) -> List[TransactionModel]:
        return [
            t for t in self.month_transactions(wallet_id, month)
            if t.operation_type == TransactionType.EXPENSE.value
        ]

    def category_totals(self, wallet_id: int, month: Optional[YearMonth] = None) -> Dict[Category, Decimal]:
        """
        EXPENSE totals per category for the month.

        Категории без расходов в словарь не попадают.
        """
        totals: Dict[Category, Decimal] = {}
        for t in self.month_expense_transactions(wallet_id, month):
            category = Category(t.category)
            totals[category] = totals.get(category, ZERO) + t.amount
        return totals

    def total_expense(self, wallet_id: int, month: Optional[YearMonth] = None) -> Decimal:
        return total(t.amount for t in self.month_expense_transactions(wallet_id, month))

    def total_income(self, wallet_id: int, month: Optional[YearMonth] = None) -> Decimal:
        return total(
            t.amount for t in self.month_transactions(wallet_id, month)
            if t.operation_type == TransactionType.INCOME.value
        )

    def biggest_expense(self, wallet_id: int, month: Optional[YearMonth] = None) -> Optional[TransactionModel]:
        """Largest EXPENSE of the month; on equal amounts the first one met wins."""
        biggest = None
        for t in self.month_expense_transactions(wallet_id, month):
            if biggest is None or t.amount > biggest.amount:
                biggest = t
        return biggest

    def biggest_expense_category_name(self, wallet_id: int, month: Optional[YearMonth] = None) -> Optional[str]:
        """Title-cased category of the biggest expense ("Food"), None if no expenses."""
        biggest = self.biggest_expense(wallet_id, month)
        if biggest is None or not biggest.category:
            return None
        return Category(biggest.category).display_name

    def expense_history_by_day(self, wallet_id: int, month: Optional[YearMonth] = None) -> Dict[str, Decimal]:
        """
        {"01 Mar": 0, "02 Mar": 12.50, ...} - every day of the month in order,
        days without expenses are zero-filled.
        """
        month = month or YearMonth.current()
        per_day: Dict = {}
        for t in self.month_expense_transactions(wallet_id, month):
            d = t.occurred_at.date()
            per_day[d] = per_day.get(d, ZERO) + t.amount

        return {day_label(d): per_day.get(d, ZERO) for d in month.days()}

    def category_shares(self, wallet_id: int, month: Optional[YearMonth] = None) -> List[CategoryShare]:
        """
        Month categories sorted by amount desc with integer percent of the
        month's total expense (round half up). Empty when nothing was spent.
        """
        totals = self.category_totals(wallet_id, month)
        month_total = total(totals.values())
        if month_total <= 0:
            return []
        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [
            CategoryShare(category=c, amount=amount, percent=percent_of(amount, month_total))
            for c, amount in ranked
        ]

    # ------------------------------------------------------------------
    # All-time
    # ------------------------------------------------------------------

    def all_expense_categories(self, wallet_id: int) -> List[TopCategory]:
        """All-time EXPENSE totals per category, largest first (percent not set)."""
        self._ensure_wallet(wallet_id)
        return self.transactions.top_categories(wallet_id)

    def top_categories(self, wallet_id: int, n: Optional[int] = None) -> List[TopCategory]:
        """
        Top-n all-time expense categories.

        Доли считаются от суммы именно этих n категорий (не от общего итога)
        и в сумме дают ровно 100.
        """
        if n is None:
            n = get_settings().TOP_CATEGORIES_LIMIT
        top = self.all_expense_categories(wallet_id)[:max(n, 0)]
        percents = distribute_percents([c.total_amount for c in top])
        for item, percent in zip(top, percents):
            item.percent = percent
        return top
