"""
Ledger: transaction use cases - business logic for wallet mutations

Каждая мутация кошелька - одна единица работы: строка кошелька блокируется
(SELECT ... FOR UPDATE), поля income/expense/balance пересчитываются,
транзакция и кошелёк сохраняются, затем commit. Любая ошибка - rollback.
"""
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from finwallet.application.ownership import OwnershipGuard
from finwallet.domain.category import Category, parse_category
from finwallet.domain.errors import (
    NotFoundError, InsufficientFundsError, ValidationError, LedgerInvariantError,
)
from finwallet.domain.money import quantize_money, add, subtract
from finwallet.domain.periods import now as local_now
from finwallet.domain.transaction import TransactionType
from finwallet.infrastructure.db.models import TransactionModel, Wallet
from finwallet.infrastructure.db.repositories import TransactionRepository, WalletRepository
from finwallet.infrastructure.db.session import unit_of_work
from finwallet.utils.validation import parse_amount

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 255


def check_wallet_invariant(wallet: Wallet) -> None:
    """
    balance == opening_balance + income - expense, income/expense >= 0.

    Raises:
        LedgerInvariantError: расхождение означает баг, а не ошибку пользователя
    """
    expected = wallet.opening_balance + wallet.income - wallet.expense
    if wallet.balance != expected or wallet.income < 0 or wallet.expense < 0:
        logger.error(
            "Wallet #%s invariant broken: balance=%s opening=%s income=%s expense=%s",
            wallet.id, wallet.balance, wallet.opening_balance, wallet.income, wallet.expense,
        )
        raise LedgerInvariantError(f"Нарушен инвариант кошелька #{wallet.id}")


def parse_operation_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise ValidationError(f"Неизвестный тип операции: {value}") from None


def apply_expense(wallet: Wallet, amount: Decimal, what: str = "расход") -> None:
    """
    Списать amount с кошелька: expense += amount, balance -= amount.

    Строгое сравнение: списать ровно весь баланс (до нуля) можно.

    Raises:
        InsufficientFundsError: если balance < amount
    """
    if wallet.balance < amount:
        logger.warning(
            "Insufficient funds on wallet #%s: balance=%s, requested %s (%s)",
            wallet.id, wallet.balance, amount, what,
        )
        raise InsufficientFundsError(
            f"Недостаточно средств: баланс {wallet.balance}, требуется {amount}"
        )
    wallet.expense = quantize_money(add(wallet.expense, amount))
    wallet.balance = quantize_money(subtract(wallet.balance, amount))


def apply_income(wallet: Wallet, amount: Decimal) -> None:
    """Зачислить amount: income += amount, balance += amount (без верхней границы)."""
    wallet.income = quantize_money(add(wallet.income, amount))
    wallet.balance = quantize_money(add(wallet.balance, amount))


class ProcessTransactionUseCase:
    """
    Use case: провести операцию INCOME/EXPENSE по кошельку пользователя

    Процесс:
    1. Валидация суммы (> 0) и описания
    2. Заблокировать кошелёк пользователя
    3. EXPENSE: проверить баланс; пересчитать income/expense/balance
    4. Сохранить транзакцию и кошелёк одним commit
    """

    def __init__(self, db: Session):
        self.db = db
        self.wallets = WalletRepository(db)
        self.transactions = TransactionRepository(db)

    def execute(
        self,
        user_id: int,
        operation_type: TransactionType,
        amount,
        category: Category,
        description: str = "",
        occurred_at: datetime | None = None,
    ) -> TransactionModel:
        """
        Args:
            user_id: владелец кошелька (уже аутентифицирован)
            operation_type: INCOME или EXPENSE
            amount: сумма (> 0)
            category: категория из закрытого списка
            description: описание (до 255 символов)
            occurred_at: дата и время операции (default=now)

        Returns:
            сохранённая транзакция

        Raises:
            ValidationError, NotFoundError, InsufficientFundsError
        """
        operation_type = parse_operation_type(operation_type)
        category = category if isinstance(category, Category) else parse_category(category)
        amount = parse_amount(amount)
        description = (description or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(f"Описание длиннее {MAX_DESCRIPTION_LENGTH} символов")

        occurred_at = occurred_at or local_now()

        with unit_of_work(self.db):
            wallet = self.wallets.get_for_update(user_id)
            if wallet is None:
                raise NotFoundError(f"Кошелёк пользователя #{user_id} не найден")

            if operation_type == TransactionType.EXPENSE:
                apply_expense(wallet, amount)
            else:
                apply_income(wallet, amount)
            check_wallet_invariant(wallet)

            tx = TransactionModel(
                wallet_id=wallet.id,
                operation_type=operation_type.value,
                amount=quantize_money(amount),
                category=category.value,
                description=description,
                occurred_at=occurred_at,
            )
            self.transactions.save(tx)
            self.wallets.save(wallet)

        logger.info(
            "Transaction #%s: %s %s (%s) on wallet #%s, balance=%s",
            tx.id, operation_type.value, amount, category.value, wallet.id, wallet.balance,
        )
        return tx


class DeleteTransactionUseCase:
    """
    Use case: удалить транзакцию владельцем

    Поля кошелька (income/expense/balance) НЕ откатываются: накопленные
    суммы кошелька остаются как были.
    """

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.guard = OwnershipGuard(db)

    def execute(self, transaction_id: int, user_id: int) -> None:
        tx = self.transactions.get(transaction_id)
        if tx is None:
            raise NotFoundError(f"Транзакция #{transaction_id} не найдена")

        self.guard.check_transaction(tx, user_id)

        with unit_of_work(self.db):
            self.transactions.delete(tx)

        logger.info("Transaction #%s deleted by user_id=%s", transaction_id, user_id)


def get_wallet_or_raise(db: Session, user_id: int) -> Wallet:
    wallet = WalletRepository(db).find_by_user_id(user_id)
    if wallet is None:
        raise NotFoundError(f"Кошелёк пользователя #{user_id} не найден")
    return wallet


def wallet_summary(wallet: Wallet) -> dict:
    return {
        "wallet_id": wallet.id,
        "name": wallet.name,
        "currency": wallet.currency,
        "balance": wallet.balance,
        "income": wallet.income,
        "expense": wallet.expense,
        "opening_balance": wallet.opening_balance,
    }
