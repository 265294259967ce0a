"""
Tests for the monthly report and dashboard data
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from finwallet.application.reports import build_monthly_report, build_dashboard
from finwallet.application.subscriptions import CreateSubscriptionUseCase, PaySubscriptionUseCase
from finwallet.application.transactions import ProcessTransactionUseCase
from finwallet.domain.category import Category
from finwallet.domain.errors import UserNotFoundError
from finwallet.domain.periods import YearMonth
from finwallet.domain.transaction import TransactionType

MARCH = YearMonth(2026, 3)


def _tx(db, user_id, op, amount, category, day, hour=12):
    ProcessTransactionUseCase(db).execute(
        user_id=user_id, operation_type=op, amount=amount, category=category,
        occurred_at=datetime(2026, 3, day, hour, 0),
    )


@pytest.fixture
def month_data(db_session, user):
    _tx(db_session, user.id, TransactionType.INCOME, "900", Category.OTHER, 1)
    _tx(db_session, user.id, TransactionType.EXPENSE, "60", Category.FOOD, 3)
    _tx(db_session, user.id, TransactionType.EXPENSE, "40", Category.TRANSPORT, 4)
    sub = CreateSubscriptionUseCase(db_session).execute(
        user_id=user.id, name="Netflix", price="15.99", expiry_on=date(2026, 3, 20),
    )
    PaySubscriptionUseCase(db_session).execute(sub.id, user.id, today=date(2026, 3, 18))
    CreateSubscriptionUseCase(db_session).execute(
        user_id=user.id, name="Gym", price="30", expiry_on=date(2026, 4, 2),
    )
    return user


def test_monthly_report_includes_paid_subscriptions(db_session, month_data):
    report = build_monthly_report(db_session, month_data.id, MARCH)

    assert report.transaction_expenses == Decimal("100.00")
    assert report.subscription_expenses == Decimal("15.99")
    assert report.total_expenses == Decimal("115.99")
    assert report.total_income == Decimal("900.00")
    assert [s.name for s in report.paid_subscriptions] == ["Netflix"]


def test_monthly_report_categories(db_session, month_data):
    report = build_monthly_report(db_session, month_data.id, MARCH)

    assert report.category_names == ["FOOD", "TRANSPORT"]
    assert report.category_percents == [60, 40]
    assert report.category_amounts == [Decimal("60.00"), Decimal("40.00")]
    assert report.biggest_expense_name == "Food"
    assert report.expense_history["03 Mar"] == Decimal("60.00")
    assert len(report.transactions) == 3


def test_empty_month_report(db_session, month_data):
    report = build_monthly_report(db_session, month_data.id, YearMonth(2026, 1))

    assert report.total_expenses == Decimal("0")
    assert report.categories == []
    assert report.biggest_expense is None
    assert len(report.expense_history) == 31


def test_dashboard(db_session, month_data):
    dashboard = build_dashboard(db_session, month_data.id, MARCH)

    assert dashboard.wallet.balance == Decimal("884.01")
    assert [c.category for c in dashboard.top_categories] == [Category.FOOD, Category.TRANSPORT]
    assert [c.percent for c in dashboard.top_categories] == [60, 40]
    assert [s.name for s in dashboard.active_subscriptions] == ["Gym"]
    assert len(dashboard.latest_transactions) == 3
    assert dashboard.month_income == Decimal("900.00")
    assert dashboard.month_expense == Decimal("100.00")


def test_report_for_unknown_user(db_session):
    with pytest.raises(UserNotFoundError):
        build_monthly_report(db_session, 999, MARCH)
