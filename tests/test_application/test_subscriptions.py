"""Tests for Subscriptions module - CRUD, payment from wallet, monthly queries."""
import pytest
from datetime import date, datetime
from decimal import Decimal

from finwallet.application.subscriptions import (
    CreateSubscriptionUseCase, UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    PaySubscriptionUseCase, list_active_subscriptions, list_paid_subscriptions_for_month,
    paid_subscriptions_total,
)
from finwallet.application.transactions import ProcessTransactionUseCase, get_wallet_or_raise
from finwallet.domain.category import Category
from finwallet.domain.errors import (
    ErrorKind, NotFoundError, UnauthorizedError, InsufficientFundsError,
    SubscriptionAlreadyPaidError, ValidationError, UserNotFoundError,
)
from finwallet.domain.periods import YearMonth
from finwallet.domain.subscription import SubscriptionPeriod, SubscriptionType
from finwallet.domain.transaction import TransactionType
from finwallet.infrastructure.db.models import SubscriptionModel, TransactionModel

PAY_DAY = date(2026, 3, 10)


@pytest.fixture
def funded_user(db_session, user):
    """Пользователь с балансом 500"""
    ProcessTransactionUseCase(db_session).execute(
        user_id=user.id, operation_type=TransactionType.INCOME, amount="400",
        category=Category.OTHER, occurred_at=datetime(2026, 3, 1, 9, 0),
    )
    return user


@pytest.fixture
def netflix(db_session, funded_user):
    return CreateSubscriptionUseCase(db_session).execute(
        user_id=funded_user.id,
        name="Netflix",
        price="15.99",
        expiry_on=date(2026, 3, 20),
        subscription_type=SubscriptionType.PREMIUM,
    )


def test_create_subscription(netflix):
    assert netflix.id is not None
    assert netflix.price == Decimal("15.99")
    assert netflix.period == SubscriptionPeriod.MONTHLY.value
    assert netflix.subscription_type == "PREMIUM"
    assert netflix.paid_date is None


def test_create_subscription_validation(db_session, user):
    uc = CreateSubscriptionUseCase(db_session)
    with pytest.raises(ValidationError):
        uc.execute(user_id=user.id, name="  ", price="10", expiry_on=PAY_DAY)
    with pytest.raises(ValidationError):
        uc.execute(user_id=user.id, name="Gym", price="0", expiry_on=PAY_DAY)
    with pytest.raises(ValidationError):
        uc.execute(user_id=user.id, name="Gym", price="10", expiry_on=PAY_DAY, period="DAILY")
    with pytest.raises(UserNotFoundError):
        uc.execute(user_id=999, name="Gym", price="10", expiry_on=PAY_DAY)


def test_pay_subscription_debits_wallet_without_transaction(db_session, funded_user, netflix):
    """500 - 15.99 = 484.01, paid_date проставлена, транзакция не создаётся"""
    tx_count = db_session.query(TransactionModel).count()

    sub = PaySubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, today=PAY_DAY)

    assert sub.paid_date == PAY_DAY
    wallet = get_wallet_or_raise(db_session, funded_user.id)
    assert wallet.balance == Decimal("484.01")
    assert wallet.expense == Decimal("15.99")
    assert wallet.balance == wallet.opening_balance + wallet.income - wallet.expense
    assert db_session.query(TransactionModel).count() == tx_count


def test_pay_twice_rejected_without_second_debit(db_session, funded_user, netflix):
    PaySubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, today=PAY_DAY)

    with pytest.raises(SubscriptionAlreadyPaidError) as exc_info:
        PaySubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, today=PAY_DAY)
    assert exc_info.value.kind == ErrorKind.ALREADY_PAID

    wallet = get_wallet_or_raise(db_session, funded_user.id)
    assert wallet.balance == Decimal("484.01")


def test_pay_with_insufficient_funds(db_session, user):
    """Баланс 100, подписка 150 - отказ, подписка остаётся неоплаченной"""
    sub = CreateSubscriptionUseCase(db_session).execute(
        user_id=user.id, name="Yearly plan", price="150", expiry_on=PAY_DAY,
        period=SubscriptionPeriod.YEARLY,
    )

    with pytest.raises(InsufficientFundsError):
        PaySubscriptionUseCase(db_session).execute(sub.id, user.id, today=PAY_DAY)

    db_session.refresh(sub)
    assert sub.paid_date is None
    assert get_wallet_or_raise(db_session, user.id).balance == Decimal("100.00")


def test_pay_foreign_subscription_unauthorized(db_session, funded_user, netflix, other_user):
    """Чужая подписка: ни кошелёк владельца, ни подписка не меняются"""
    with pytest.raises(UnauthorizedError):
        PaySubscriptionUseCase(db_session).execute(netflix.id, other_user.id, today=PAY_DAY)

    owner_wallet = get_wallet_or_raise(db_session, funded_user.id)
    assert owner_wallet.balance == Decimal("500.00")
    assert owner_wallet.expense == Decimal("0.00")
    other_wallet = get_wallet_or_raise(db_session, other_user.id)
    assert other_wallet.balance == Decimal("100.00")
    db_session.refresh(netflix)
    assert netflix.paid_date is None


def test_pay_missing_subscription(db_session, user):
    with pytest.raises(NotFoundError):
        PaySubscriptionUseCase(db_session).execute(4242, user.id, today=PAY_DAY)


def test_update_unpaid_subscription(db_session, funded_user, netflix):
    sub = UpdateSubscriptionUseCase(db_session).execute(
        netflix.id, funded_user.id, price="17.99", period="YEARLY", name="Netflix 4K",
    )
    assert sub.price == Decimal("17.99")
    assert sub.period == "YEARLY"
    assert sub.name == "Netflix 4K"


def test_update_paid_subscription_rejected(db_session, funded_user, netflix):
    PaySubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, today=PAY_DAY)
    with pytest.raises(SubscriptionAlreadyPaidError):
        UpdateSubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, price="1")


def test_update_unknown_field_rejected(db_session, funded_user, netflix):
    with pytest.raises(ValidationError):
        UpdateSubscriptionUseCase(db_session).execute(netflix.id, funded_user.id, paid_date=PAY_DAY)


def test_delete_subscription(db_session, funded_user, netflix, other_user):
    with pytest.raises(UnauthorizedError):
        DeleteSubscriptionUseCase(db_session).execute(netflix.id, other_user.id)

    DeleteSubscriptionUseCase(db_session).execute(netflix.id, funded_user.id)
    assert db_session.query(SubscriptionModel).count() == 0


def test_active_and_paid_lists(db_session, funded_user, netflix):
    spotify = CreateSubscriptionUseCase(db_session).execute(
        user_id=funded_user.id, name="Spotify", price="9.99", expiry_on=date(2026, 3, 15),
    )
    assert [s.name for s in list_active_subscriptions(db_session, funded_user.id)] == ["Spotify", "Netflix"]

    PaySubscriptionUseCase(db_session).execute(spotify.id, funded_user.id, today=PAY_DAY)

    assert [s.name for s in list_active_subscriptions(db_session, funded_user.id)] == ["Netflix"]
    paid = list_paid_subscriptions_for_month(db_session, funded_user.id, YearMonth(2026, 3))
    assert [s.name for s in paid] == ["Spotify"]
    assert paid_subscriptions_total(paid) == Decimal("9.99")
    assert list_paid_subscriptions_for_month(db_session, funded_user.id, YearMonth(2026, 4)) == []
