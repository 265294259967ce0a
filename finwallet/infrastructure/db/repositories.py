"""
Repositories - persistence collaborator of the ledger core.

Методы find_* / get_* возвращают None, если строки нет: решение о том,
ошибка ли это, принимает use case.
"""
from datetime import date, datetime
from typing import Optional, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from finwallet.domain.category import Category
from finwallet.domain.money import quantize_money
from finwallet.domain.transaction import TopCategory, TransactionType
from finwallet.infrastructure.db.models import (
    User, Wallet, TransactionModel, SubscriptionModel, BudgetModel,
)


class UserRepository:
    """Identity collaborator: existence and ownership facts about users"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def exists(self, user_id: int) -> bool:
        return self.get(user_id) is not None

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()


class WalletRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, wallet_id: int) -> Optional[Wallet]:
        return self.db.get(Wallet, wallet_id)

    def find_by_user_id(self, user_id: int) -> Optional[Wallet]:
        return self.db.query(Wallet).filter(Wallet.user_id == user_id).first()

    def get_for_update(self, user_id: int) -> Optional[Wallet]:
        """
        Кошелёк пользователя с блокировкой строки (SELECT ... FOR UPDATE).

        Блокировка держится до commit/rollback текущей транзакции, поэтому
        конкурентные операции над одним кошельком выполняются по очереди.
        populate_existing() перечитывает строку, даже если объект уже в сессии.
        """
        stmt = (
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalars().first()

    def save(self, wallet: Wallet) -> Wallet:
        self.db.add(wallet)
        self.db.flush()
        return wallet

    def delete(self, wallet: Wallet) -> None:
        self.db.delete(wallet)
        self.db.flush()


class TransactionRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: int) -> Optional[TransactionModel]:
        return self.db.get(TransactionModel, transaction_id)

    def save(self, tx: TransactionModel) -> TransactionModel:
        self.db.add(tx)
        self.db.flush()
        return tx

    def delete(self, tx: TransactionModel) -> None:
        self.db.delete(tx)
        self.db.flush()

    def delete_by_wallet(self, wallet_id: int) -> int:
        count = (
            self.db.query(TransactionModel)
            .filter(TransactionModel.wallet_id == wallet_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count

    def list_by_wallet(
        self,
        wallet_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TransactionModel]:
        """
        Транзакции кошелька в окне [start, end), самые свежие первыми.
        """
        query = self.db.query(TransactionModel).filter(TransactionModel.wallet_id == wallet_id)
        if start is not None:
            query = query.filter(TransactionModel.occurred_at >= start)
        if end is not None:
            query = query.filter(TransactionModel.occurred_at < end)
        return query.order_by(TransactionModel.occurred_at.desc(), TransactionModel.id.desc()).all()

    def top_categories(self, wallet_id: int) -> List[TopCategory]:
        """
        All-time EXPENSE totals per category, largest first.

        Equal sums keep insertion order (the category whose first expense
        was recorded earlier comes first).
        """
        total = func.sum(TransactionModel.amount).label("total")
        rows = (
            self.db.query(TransactionModel.category, total)
            .filter(
                TransactionModel.wallet_id == wallet_id,
                TransactionModel.operation_type == TransactionType.EXPENSE.value,
            )
            .group_by(TransactionModel.category)
            .order_by(total.desc(), func.min(TransactionModel.id).asc())
            .all()
        )
        return [
            TopCategory(category=Category(row.category), total_amount=quantize_money(row.total))
            for row in rows
        ]


class SubscriptionRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, subscription_id: int) -> Optional[SubscriptionModel]:
        return self.db.get(SubscriptionModel, subscription_id)

    def get_for_update(self, subscription_id: int) -> Optional[SubscriptionModel]:
        stmt = (
            select(SubscriptionModel)
            .where(SubscriptionModel.id == subscription_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalars().first()

    def save(self, sub: SubscriptionModel) -> SubscriptionModel:
        self.db.add(sub)
        self.db.flush()
        return sub

    def delete(self, sub: SubscriptionModel) -> None:
        self.db.delete(sub)
        self.db.flush()

    def delete_by_user(self, user_id: int) -> int:
        count = (
            self.db.query(SubscriptionModel)
            .filter(SubscriptionModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count

    def list_by_user(self, user_id: int) -> List[SubscriptionModel]:
        return (
            self.db.query(SubscriptionModel)
            .filter(SubscriptionModel.user_id == user_id)
            .order_by(SubscriptionModel.expiry_on.asc(), SubscriptionModel.id.asc())
            .all()
        )

    def list_unpaid_by_user(self, user_id: int) -> List[SubscriptionModel]:
        return (
            self.db.query(SubscriptionModel)
            .filter(
                SubscriptionModel.user_id == user_id,
                SubscriptionModel.paid_date.is_(None),
            )
            .order_by(SubscriptionModel.expiry_on.asc(), SubscriptionModel.id.asc())
            .all()
        )

    def list_paid_between(self, user_id: int, start: date, end: date) -> List[SubscriptionModel]:
        """Paid in [start, end), most recent payment first."""
        return (
            self.db.query(SubscriptionModel)
            .filter(
                SubscriptionModel.user_id == user_id,
                SubscriptionModel.paid_date.isnot(None),
                SubscriptionModel.paid_date >= start,
                SubscriptionModel.paid_date < end,
            )
            .order_by(SubscriptionModel.paid_date.desc(), SubscriptionModel.id.desc())
            .all()
        )

    def list_unpaid_expiring_before(self, user_id: int, limit: date) -> List[SubscriptionModel]:
        return (
            self.db.query(SubscriptionModel)
            .filter(
                SubscriptionModel.user_id == user_id,
                SubscriptionModel.paid_date.is_(None),
                SubscriptionModel.expiry_on < limit,
            )
            .order_by(SubscriptionModel.expiry_on.asc(), SubscriptionModel.id.asc())
            .all()
        )


class BudgetRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, budget_id: int) -> Optional[BudgetModel]:
        return self.db.get(BudgetModel, budget_id)

    def find(self, user_id: int, category: Category, year: int, month: int) -> Optional[BudgetModel]:
        return self.db.query(BudgetModel).filter(
            BudgetModel.user_id == user_id,
            BudgetModel.category == category.value,
            BudgetModel.year == year,
            BudgetModel.month == month,
        ).first()

    def list_for_month(self, user_id: int, year: int, month: int) -> List[BudgetModel]:
        return (
            self.db.query(BudgetModel)
            .filter(
                BudgetModel.user_id == user_id,
                BudgetModel.year == year,
                BudgetModel.month == month,
            )
            .order_by(BudgetModel.id.asc())
            .all()
        )

    def save(self, budget: BudgetModel) -> BudgetModel:
        self.db.add(budget)
        self.db.flush()
        return budget

    def delete(self, budget: BudgetModel) -> None:
        self.db.delete(budget)
        self.db.flush()

    def delete_by_user(self, user_id: int) -> int:
        count = (
            self.db.query(BudgetModel)
            .filter(BudgetModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count
