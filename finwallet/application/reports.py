"""
Monthly report and dashboard data.

Report expense total is the only figure that includes paid subscriptions:
transaction expenses of the month + subscriptions paid in the month.
Rendering (HTML/PDF) is outside this module.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from finwallet.application.category_analytics import CategoryAggregator, CategoryShare
from finwallet.application.subscriptions import (
    list_active_subscriptions, list_paid_subscriptions_for_month, paid_subscriptions_total,
)
from finwallet.application.transactions import get_wallet_or_raise
from finwallet.application.users import get_user_or_raise
from finwallet.domain.money import add
from finwallet.domain.periods import YearMonth
from finwallet.domain.transaction import TopCategory
from finwallet.infrastructure.db.models import TransactionModel, SubscriptionModel, Wallet

DASHBOARD_LATEST_LIMIT = 5


@dataclass
class MonthlyReport:
    month: YearMonth
    wallet: Wallet
    categories: List[CategoryShare]
    transactions: List[TransactionModel]
    biggest_expense: Optional[TransactionModel]
    biggest_expense_name: Optional[str]
    transaction_expenses: Decimal
    subscription_expenses: Decimal
    total_expenses: Decimal
    total_income: Decimal
    expense_history: Dict[str, Decimal]
    paid_subscriptions: List[SubscriptionModel]

    @property
    def category_names(self) -> List[str]:
        return [c.name for c in self.categories]

    @property
    def category_percents(self) -> List[int]:
        return [c.percent for c in self.categories]

    @property
    def category_amounts(self) -> List[Decimal]:
        return [c.amount for c in self.categories]


@dataclass
class Dashboard:
    wallet: Wallet
    top_categories: List[TopCategory]
    active_subscriptions: List[SubscriptionModel]
    latest_transactions: List[TransactionModel]
    month_income: Decimal
    month_expense: Decimal


def build_monthly_report(db: Session, user_id: int, month: Optional[YearMonth] = None) -> MonthlyReport:
    """
    Собрать данные месячного отчёта (по умолчанию - текущий месяц).

    Raises:
        UserNotFoundError, NotFoundError (нет кошелька)
    """
    get_user_or_raise(db, user_id)
    wallet = get_wallet_or_raise(db, user_id)
    month = month or YearMonth.current()
    aggregator = CategoryAggregator(db)

    transaction_expenses = aggregator.total_expense(wallet.id, month)
    paid = list_paid_subscriptions_for_month(db, user_id, month)
    subscription_expenses = paid_subscriptions_total(paid)

    return MonthlyReport(
        month=month,
        wallet=wallet,
        categories=aggregator.category_shares(wallet.id, month),
        transactions=aggregator.month_transactions(wallet.id, month),
        biggest_expense=aggregator.biggest_expense(wallet.id, month),
        biggest_expense_name=aggregator.biggest_expense_category_name(wallet.id, month),
        transaction_expenses=transaction_expenses,
        subscription_expenses=subscription_expenses,
        total_expenses=add(transaction_expenses, subscription_expenses),
        total_income=aggregator.total_income(wallet.id, month),
        expense_history=aggregator.expense_history_by_day(wallet.id, month),
        paid_subscriptions=paid,
    )


def build_dashboard(db: Session, user_id: int, month: Optional[YearMonth] = None) -> Dashboard:
    get_user_or_raise(db, user_id)
    wallet = get_wallet_or_raise(db, user_id)
    month = month or YearMonth.current()
    aggregator = CategoryAggregator(db)

    return Dashboard(
        wallet=wallet,
        top_categories=aggregator.top_categories(wallet.id),
        active_subscriptions=list_active_subscriptions(db, user_id),
        latest_transactions=aggregator.month_transactions(wallet.id, month)[:DASHBOARD_LATEST_LIMIT],
        month_income=aggregator.total_income(wallet.id, month),
        month_expense=aggregator.total_expense(wallet.id, month),
    )
