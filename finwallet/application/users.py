"""
User / wallet lifecycle use cases.

Регистрация создаёт пользователя и ровно один кошелёк со стартовым балансом.
Удаление пользователя - явный каскад: budgets -> subscriptions ->
transactions -> wallet -> user.
"""
import logging

from sqlalchemy.orm import Session

from finwallet.config import get_settings
from finwallet.domain.errors import ValidationError, UserNotFoundError
from finwallet.domain.money import ZERO, quantize_money
from finwallet.infrastructure.db.models import User, Wallet
from finwallet.infrastructure.db.repositories import (
    UserRepository, WalletRepository, TransactionRepository,
    SubscriptionRepository, BudgetRepository,
)
from finwallet.infrastructure.db.session import unit_of_work

logger = logging.getLogger(__name__)


class CreateDefaultWalletUseCase:
    """
    Use case: создать кошелёк пользователя (income=0, expense=0,
    balance=стартовый кредит). Повторный вызов возвращает существующий.
    """

    def __init__(self, db: Session):
        self.db = db
        self.wallets = WalletRepository(db)

    def execute(self, user_id: int) -> Wallet:
        existing = self.wallets.find_by_user_id(user_id)
        if existing is not None:
            return existing

        settings = get_settings()
        opening = quantize_money(settings.WALLET_OPENING_BALANCE)
        wallet = Wallet(
            user_id=user_id,
            name=settings.WALLET_NAME,
            currency=settings.WALLET_CURRENCY,
            opening_balance=opening,
            income=ZERO,
            expense=ZERO,
            balance=opening,
        )
        self.wallets.save(wallet)
        logger.info("Wallet #%s created for user_id=%s (opening balance %s)", wallet.id, user_id, opening)
        return wallet


class RegisterUserUseCase:
    """Use case: зарегистрировать пользователя вместе с кошельком"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def execute(self, username: str, email: str | None = None) -> User:
        username = username.strip()
        if not username:
            raise ValidationError("Имя пользователя не может быть пустым")
        if self.users.find_by_username(username) is not None:
            raise ValidationError(f"Пользователь «{username}» уже существует")

        with unit_of_work(self.db):
            user = self.users.save(User(username=username, email=email))
            CreateDefaultWalletUseCase(self.db).execute(user.id)

        return user


class DeleteUserUseCase:
    """Use case: удалить пользователя и все его данные (каскад вручную)"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.wallets = WalletRepository(db)

    def execute(self, user_id: int) -> None:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        with unit_of_work(self.db):
            BudgetRepository(self.db).delete_by_user(user_id)
            SubscriptionRepository(self.db).delete_by_user(user_id)
            wallet = self.wallets.find_by_user_id(user_id)
            if wallet is not None:
                TransactionRepository(self.db).delete_by_wallet(wallet.id)
                self.wallets.delete(wallet)
            self.users.delete(user)

        logger.info("User #%s deleted with all wallet data", user_id)


def get_user_or_raise(db: Session, user_id: int) -> User:
    user = UserRepository(db).get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user
