"""
OwnershipGuard - does this wallet / transaction / subscription / budget
belong to the requesting user.

The guard never authenticates; it receives an already-authenticated user id.
"""
import logging

from sqlalchemy.orm import Session

from finwallet.domain.errors import UnauthorizedError
from finwallet.infrastructure.db.models import (
    Wallet, TransactionModel, SubscriptionModel, BudgetModel,
)
from finwallet.infrastructure.db.repositories import WalletRepository, UserRepository

logger = logging.getLogger(__name__)


class OwnershipGuard:

    def __init__(self, db: Session):
        self.wallets = WalletRepository(db)
        self.users = UserRepository(db)

    def owns_wallet(self, wallet: Wallet | None, user_id: int) -> bool:
        if wallet is None or wallet.user_id is None:
            return False
        return wallet.user_id == user_id and self.users.exists(wallet.user_id)

    def check_wallet(self, wallet: Wallet | None, user_id: int, what: str = "кошелёк") -> Wallet:
        if not self.owns_wallet(wallet, user_id):
            logger.warning("Ownership check failed: %s, user_id=%s", what, user_id)
            raise UnauthorizedError(f"Нет доступа: {what} принадлежит другому пользователю")
        return wallet

    def check_transaction(self, tx: TransactionModel, user_id: int) -> Wallet:
        """Транзакция принадлежит пользователю транзитивно: transaction -> wallet -> user."""
        wallet = self.wallets.get(tx.wallet_id)
        return self.check_wallet(wallet, user_id, what=f"транзакция #{tx.id}")

    def check_subscription(self, sub: SubscriptionModel, user_id: int) -> Wallet:
        """
        Подписку может оплатить/удалить только владелец кошелька её пользователя.

        Returns:
            кошелёк владельца подписки
        """
        wallet = self.wallets.find_by_user_id(sub.user_id)
        return self.check_wallet(wallet, user_id, what=f"подписка #{sub.id}")

    def check_budget(self, budget: BudgetModel, user_id: int) -> None:
        if budget.user_id != user_id:
            logger.warning("Ownership check failed: budget #%s, user_id=%s", budget.id, user_id)
            raise UnauthorizedError("Нет доступа: бюджет принадлежит другому пользователю")
