"""
Ledger error taxonomy.

Every failure carries an ErrorKind so callers (HTTP layer, jobs) branch on
the kind instead of on exception classes or message text.
"""
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    VALIDATION = "VALIDATION"
    ALREADY_PAID = "ALREADY_PAID"
    INVARIANT = "INVARIANT"


class LedgerError(Exception):
    """Базовая ошибка ядра (кошелёк, транзакции, подписки, бюджеты)"""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """Сущность с таким ID не существует"""
    kind = ErrorKind.NOT_FOUND


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        super().__init__(f"Пользователь #{user_id} не найден")
        self.user_id = user_id


class UnauthorizedError(LedgerError):
    """Сущность существует, но принадлежит другому пользователю"""
    kind = ErrorKind.UNAUTHORIZED


class InsufficientFundsError(LedgerError):
    """Расход или оплата превышает доступный баланс"""
    kind = ErrorKind.INSUFFICIENT_FUNDS


class ValidationError(LedgerError, ValueError):
    """Некорректная сумма / категория / дата"""
    kind = ErrorKind.VALIDATION


class SubscriptionAlreadyPaidError(LedgerError):
    kind = ErrorKind.ALREADY_PAID


class LedgerInvariantError(LedgerError):
    """Нарушен инвариант кошелька - это баг, а не пользовательская ошибка"""
    kind = ErrorKind.INVARIANT
