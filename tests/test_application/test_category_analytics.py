"""
Tests for CategoryAggregator (month windows, category totals, top categories)
"""
from datetime import datetime
from decimal import Decimal

import pytest

from finwallet.application.category_analytics import CategoryAggregator
from finwallet.application.transactions import ProcessTransactionUseCase, get_wallet_or_raise
from finwallet.domain.category import Category
from finwallet.domain.errors import NotFoundError
from finwallet.domain.periods import YearMonth
from finwallet.domain.transaction import TransactionType

MARCH = YearMonth(2026, 3)
APRIL = YearMonth(2026, 4)


def _tx(db, user_id, op, amount, category, when):
    return ProcessTransactionUseCase(db).execute(
        user_id=user_id, operation_type=op, amount=amount, category=category, occurred_at=when,
    )


@pytest.fixture
def wallet(db_session, user):
    """
    Март: FOOD 200, TRANSPORT 150, UTILITIES 100 (последняя минута месяца);
    ENTERTAINMENT 50 - ровно в полночь 1 апреля.
    """
    _tx(db_session, user.id, TransactionType.INCOME, "1000", Category.OTHER, datetime(2026, 3, 1, 8, 0))
    _tx(db_session, user.id, TransactionType.EXPENSE, "200", Category.FOOD, datetime(2026, 3, 2, 10, 0))
    _tx(db_session, user.id, TransactionType.EXPENSE, "150", Category.TRANSPORT, datetime(2026, 3, 5, 9, 0))
    _tx(db_session, user.id, TransactionType.EXPENSE, "100", Category.UTILITIES, datetime(2026, 3, 31, 23, 59))
    _tx(db_session, user.id, TransactionType.EXPENSE, "50", Category.ENTERTAINMENT, datetime(2026, 4, 1, 0, 0))
    return get_wallet_or_raise(db_session, user.id)


def test_wallet_balance_after_fixture(wallet):
    assert wallet.balance == Decimal("600.00")


def test_month_transactions_window_and_order(db_session, wallet):
    txs = CategoryAggregator(db_session).month_transactions(wallet.id, MARCH)

    assert [t.category for t in txs] == ["UTILITIES", "TRANSPORT", "FOOD", "OTHER"]
    april = CategoryAggregator(db_session).month_transactions(wallet.id, APRIL)
    assert [t.category for t in april] == ["ENTERTAINMENT"]


def test_category_totals_are_sparse(db_session, wallet):
    totals = CategoryAggregator(db_session).category_totals(wallet.id, MARCH)

    assert totals == {
        Category.FOOD: Decimal("200.00"),
        Category.TRANSPORT: Decimal("150.00"),
        Category.UTILITIES: Decimal("100.00"),
    }
    assert Category.ENTERTAINMENT not in totals


def test_month_income_and_expense(db_session, wallet):
    aggregator = CategoryAggregator(db_session)
    assert aggregator.total_expense(wallet.id, MARCH) == Decimal("450.00")
    assert aggregator.total_income(wallet.id, MARCH) == Decimal("1000.00")
    assert aggregator.total_income(wallet.id, APRIL) == Decimal("0")


def test_biggest_expense(db_session, wallet):
    aggregator = CategoryAggregator(db_session)
    biggest = aggregator.biggest_expense(wallet.id, MARCH)

    assert biggest.amount == Decimal("200.00")
    assert aggregator.biggest_expense_category_name(wallet.id, MARCH) == "Food"
    assert aggregator.biggest_expense_category_name(wallet.id, YearMonth(2026, 5)) is None


def test_expense_history_is_dense(db_session, wallet):
    history = CategoryAggregator(db_session).expense_history_by_day(wallet.id, MARCH)

    assert len(history) == 31
    assert list(history)[0] == "01 Mar"
    assert list(history)[-1] == "31 Mar"
    assert history["01 Mar"] == Decimal("0")
    assert history["02 Mar"] == Decimal("200.00")
    assert history["05 Mar"] == Decimal("150.00")
    assert history["31 Mar"] == Decimal("100.00")


def test_category_shares_of_month(db_session, wallet):
    shares = CategoryAggregator(db_session).category_shares(wallet.id, MARCH)

    assert [s.category for s in shares] == [Category.FOOD, Category.TRANSPORT, Category.UTILITIES]
    assert [s.percent for s in shares] == [44, 33, 22]
    assert CategoryAggregator(db_session).category_shares(wallet.id, YearMonth(2026, 5)) == []


def test_top_three_categories_sum_to_100(db_session, wallet):
    """Доли считаются от суммы топ-3 (450), а не от всех расходов (500)"""
    top = CategoryAggregator(db_session).top_categories(wallet.id, 3)

    assert [c.category for c in top] == [Category.FOOD, Category.TRANSPORT, Category.UTILITIES]
    assert [c.total_amount for c in top] == [Decimal("200.00"), Decimal("150.00"), Decimal("100.00")]
    assert [c.percent for c in top] == [45, 33, 22]
    assert sum(c.percent for c in top) == 100
    assert top[0].name == "Food"


def test_top_categories_default_limit_and_all_time(db_session, wallet):
    aggregator = CategoryAggregator(db_session)
    assert len(aggregator.top_categories(wallet.id)) == 3

    everything = aggregator.top_categories(wallet.id, 10)
    assert [c.percent for c in everything] == [40, 30, 20, 10]


def test_top_categories_equal_sums_keep_first_recorded(db_session, user):
    wallet = get_wallet_or_raise(db_session, user.id)
    _tx(db_session, user.id, TransactionType.EXPENSE, "30", Category.HEALTH, datetime(2026, 3, 1, 10, 0))
    _tx(db_session, user.id, TransactionType.EXPENSE, "30", Category.GIFTS, datetime(2026, 2, 1, 10, 0))

    top = CategoryAggregator(db_session).top_categories(wallet.id)
    assert [c.category for c in top] == [Category.HEALTH, Category.GIFTS]
    assert [c.percent for c in top] == [50, 50]


def test_no_expenses(db_session, user):
    wallet = get_wallet_or_raise(db_session, user.id)
    aggregator = CategoryAggregator(db_session)

    assert aggregator.top_categories(wallet.id) == []
    assert aggregator.category_totals(wallet.id, MARCH) == {}
    assert aggregator.biggest_expense(wallet.id, MARCH) is None


def test_unknown_wallet(db_session):
    with pytest.raises(NotFoundError):
        CategoryAggregator(db_session).month_transactions(404, MARCH)
    with pytest.raises(NotFoundError):
        CategoryAggregator(db_session).top_categories(404)
