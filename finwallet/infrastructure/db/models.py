"""
SQLAlchemy ORM models

Связей (relationship) нет намеренно: кошелёк, транзакции, подписки и бюджеты
читаются явными запросами через репозитории.
"""
from decimal import Decimal
from datetime import date as date_type, datetime
from sqlalchemy import String, DateTime, Integer, TIMESTAMP, Date, func, Numeric, UniqueConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from finwallet.infrastructure.db.session import Base


class User(Base):
    """
    User (identity). Аутентификация живёт вне ядра.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
    )


class Wallet(Base):
    """
    Кошелёк пользователя (1:1 с users).

    Инвариант: balance == opening_balance + income - expense
    """
    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, server_default="BGN")

    opening_balance: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, server_default="0")
    income: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, server_default="0")
    expense: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, server_default="0")
    balance: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, server_default="0")

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class TransactionModel(Base):
    """
    Income/expense record of a wallet
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    wallet_id: Mapped[int] = mapped_column(Integer, ForeignKey("wallets.id"), nullable=False, index=True)

    operation_type: Mapped[str] = mapped_column(String(16), nullable=False)  # INCOME, EXPENSE
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")

    # date + time: порядок внутри дня важен для "последних" операций
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_transactions_wallet_occurred", "wallet_id", "occurred_at"),
    )


class SubscriptionModel(Base):
    """
    Recurring charge owned by a user (not a wallet).

    paid_date IS NULL -> активная (ожидает оплаты). Оплата не создаёт
    TransactionModel, только списывает сумму с кошелька.
    """
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    period: Mapped[str] = mapped_column(String(16), nullable=False, server_default="MONTHLY")
    subscription_type: Mapped[str] = mapped_column(String(16), nullable=False, server_default="DEFAULT")
    expiry_on: Mapped[date_type] = mapped_column(Date, nullable=False)
    paid_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index("ix_subscriptions_expiry_paid", "expiry_on", "paid_date"),
    )


class BudgetModel(Base):
    """
    Monthly spending target for one category.
    """
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    category: Mapped[str] = mapped_column(String(32), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "category", "year", "month", name="uq_budget_user_category_month"),
    )
