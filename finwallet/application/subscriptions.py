"""
Subscription use cases - CRUD подписок + оплата с кошелька.

Оплата списывает price с кошелька владельца как расход, но НЕ создаёт
TransactionModel: оплаченные подписки учитываются отдельно
(list_paid_subscriptions_for_month) и попадают только в те итоги расходов,
которые явно их включают.
"""
import logging
from datetime import date

from sqlalchemy.orm import Session

from finwallet.application.ownership import OwnershipGuard
from finwallet.application.transactions import apply_expense, check_wallet_invariant
from finwallet.application.users import get_user_or_raise
from finwallet.domain.errors import (
    NotFoundError, ValidationError, SubscriptionAlreadyPaidError,
)
from finwallet.domain.money import total
from finwallet.domain.periods import YearMonth, today as local_today
from finwallet.domain.subscription import SubscriptionPeriod, SubscriptionType
from finwallet.infrastructure.db.models import SubscriptionModel
from finwallet.infrastructure.db.repositories import SubscriptionRepository, WalletRepository
from finwallet.infrastructure.db.session import unit_of_work
from finwallet.utils.validation import parse_amount

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Неизвестное значение {label}: {value}") from None


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)

    def execute(
        self,
        user_id: int,
        name: str,
        price,
        expiry_on: date,
        period: SubscriptionPeriod = SubscriptionPeriod.MONTHLY,
        subscription_type: SubscriptionType = SubscriptionType.DEFAULT,
    ) -> SubscriptionModel:
        name = name.strip()
        if not name:
            raise ValidationError("Название не может быть пустым")
        price = parse_amount(price)
        period = _parse_enum(SubscriptionPeriod, period, "периода")
        subscription_type = _parse_enum(SubscriptionType, subscription_type, "типа")

        get_user_or_raise(self.db, user_id)

        with unit_of_work(self.db):
            sub = self.subscriptions.save(SubscriptionModel(
                user_id=user_id,
                name=name,
                price=price,
                period=period.value,
                subscription_type=subscription_type.value,
                expiry_on=expiry_on,
            ))
        return sub


class UpdateSubscriptionUseCase:
    """Редактировать можно только неоплаченную подписку"""

    EDITABLE = ("name", "price", "period", "subscription_type", "expiry_on")

    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.guard = OwnershipGuard(db)

    def execute(self, subscription_id: int, user_id: int, **changes) -> SubscriptionModel:
        sub = self.subscriptions.get(subscription_id)
        if sub is None:
            raise NotFoundError(f"Подписка #{subscription_id} не найдена")
        self.guard.check_subscription(sub, user_id)
        if sub.paid_date is not None:
            raise SubscriptionAlreadyPaidError("Оплаченную подписку нельзя изменить")

        unknown = set(changes) - set(self.EDITABLE)
        if unknown:
            raise ValidationError(f"Нельзя изменить поля: {', '.join(sorted(unknown))}")

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError("Название не может быть пустым")
            changes["name"] = name
        if "price" in changes:
            changes["price"] = parse_amount(changes["price"])
        if "period" in changes:
            changes["period"] = _parse_enum(SubscriptionPeriod, changes["period"], "периода").value
        if "subscription_type" in changes:
            changes["subscription_type"] = _parse_enum(
                SubscriptionType, changes["subscription_type"], "типа"
            ).value

        with unit_of_work(self.db):
            for key, value in changes.items():
                setattr(sub, key, value)
            self.subscriptions.save(sub)
        return sub


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.guard = OwnershipGuard(db)

    def execute(self, subscription_id: int, user_id: int) -> None:
        sub = self.subscriptions.get(subscription_id)
        if sub is None:
            raise NotFoundError(f"Подписка #{subscription_id} не найдена")
        self.guard.check_subscription(sub, user_id)

        with unit_of_work(self.db):
            self.subscriptions.delete(sub)
        logger.info("Subscription #%s deleted by user_id=%s", subscription_id, user_id)


# ============================================================================
# Payment
# ============================================================================


class PaySubscriptionUseCase:
    """
    Use case: оплатить подписку с кошелька владельца

    Порядок проверок: подписка существует -> кошелёк владельца подписки
    принадлежит запрашивающему -> подписка ещё не оплачена -> хватает баланса.
    Подписка оплачивается один раз; повторная оплата отклоняется
    (SubscriptionAlreadyPaidError) без списания.
    """

    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.wallets = WalletRepository(db)
        self.guard = OwnershipGuard(db)

    def execute(self, subscription_id: int, user_id: int, today: date | None = None) -> SubscriptionModel:
        today = today or local_today()

        with unit_of_work(self.db):
            sub = self.subscriptions.get_for_update(subscription_id)
            if sub is None:
                raise NotFoundError(f"Подписка #{subscription_id} не найдена")

            wallet = self.wallets.get_for_update(sub.user_id)
            self.guard.check_wallet(wallet, user_id, what=f"подписка #{subscription_id}")

            if sub.paid_date is not None:
                logger.warning("Subscription #%s already paid on %s", sub.id, sub.paid_date)
                raise SubscriptionAlreadyPaidError(
                    f"Подписка «{sub.name}» уже оплачена {sub.paid_date.isoformat()}"
                )

            apply_expense(wallet, sub.price, what=f"подписка #{sub.id}")
            check_wallet_invariant(wallet)

            sub.paid_date = today
            self.subscriptions.save(sub)
            self.wallets.save(wallet)

        logger.info(
            "Subscription #%s paid: %s from wallet #%s, balance=%s",
            sub.id, sub.price, wallet.id, wallet.balance,
        )
        return sub


# ============================================================================
# Queries
# ============================================================================


def list_subscriptions(db: Session, user_id: int) -> list[SubscriptionModel]:
    return SubscriptionRepository(db).list_by_user(user_id)


def list_active_subscriptions(db: Session, user_id: int) -> list[SubscriptionModel]:
    """Неоплаченные подписки пользователя, ближайшие к истечению первыми"""
    return SubscriptionRepository(db).list_unpaid_by_user(user_id)


def list_paid_subscriptions_for_month(
    db: Session, user_id: int, month: YearMonth | None = None
) -> list[SubscriptionModel]:
    """Подписки, оплаченные в данном месяце (по умолчанию - текущем), свежие первыми"""
    get_user_or_raise(db, user_id)
    month = month or YearMonth.current()
    return SubscriptionRepository(db).list_paid_between(
        user_id, month.start.date(), month.end.date()
    )


def paid_subscriptions_total(subscriptions: list[SubscriptionModel]):
    return total(s.price for s in subscriptions)
