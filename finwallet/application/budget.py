"""
Budget use cases and the budget page reconciliation.

Plan = BudgetModel (one per user/category/year/month).
Fact is computed on-the-fly from the month's EXPENSE transactions
(CategoryAggregator), so budgets never store spent amounts.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Set, Optional

from sqlalchemy.orm import Session

from finwallet.application.category_analytics import CategoryAggregator
from finwallet.application.ownership import OwnershipGuard
from finwallet.application.users import get_user_or_raise
from finwallet.domain.category import Category, parse_category
from finwallet.domain.errors import NotFoundError
from finwallet.domain.money import ZERO, total, subtract, percent_of
from finwallet.domain.periods import YearMonth
from finwallet.infrastructure.db.models import BudgetModel, User
from finwallet.infrastructure.db.repositories import BudgetRepository, WalletRepository
from finwallet.infrastructure.db.session import unit_of_work
from finwallet.utils.validation import parse_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetInfo:
    budget: BudgetModel
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    is_over_budget: bool


@dataclass
class BudgetPageData:
    user: User
    budgets: List[BudgetModel]
    budget_info: Dict[Category, BudgetInfo]
    all_categories: List[Category]
    categories_with_budgets: Set[Category]
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    current_month: YearMonth
    previous_month: YearMonth
    next_month: YearMonth
    current_month_name: str = field(default="")


def reconcile_budget(budget: BudgetModel, category_totals: Dict[Category, Decimal]) -> BudgetInfo:
    """
    spent / remaining / percentage / is_over_budget for one budget.

    percentage: 2 знака, ROUND_HALF_UP; 0 при нулевом бюджете.
    Потратить ровно бюджет - не перерасход (строгое >).
    """
    spent = category_totals.get(Category(budget.category), ZERO)
    remaining = subtract(budget.amount, spent)
    percentage = percent_of(spent, budget.amount, places=2) if budget.amount > 0 else Decimal("0.00")
    return BudgetInfo(
        budget=budget,
        spent=spent,
        remaining=remaining,
        percentage=percentage,
        is_over_budget=spent > budget.amount,
    )


class BudgetReconciler:
    """Join a user's monthly budgets with the month's category spending."""

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.wallets = WalletRepository(db)
        self.aggregator = CategoryAggregator(db)

    def budgets_for_month(self, user_id: int, month: YearMonth) -> List[BudgetModel]:
        get_user_or_raise(self.db, user_id)
        return self.budgets.list_for_month(user_id, month.year, month.month)

    def _category_totals(self, user_id: int, month: YearMonth) -> Dict[Category, Decimal]:
        wallet = self.wallets.find_by_user_id(user_id)
        if wallet is None:
            return {}
        return self.aggregator.category_totals(wallet.id, month)

    def budget_info_for_month(self, user_id: int, month: YearMonth) -> Dict[Category, BudgetInfo]:
        get_user_or_raise(self.db, user_id)
        totals = self._category_totals(user_id, month)
        return {
            Category(b.category): reconcile_budget(b, totals)
            for b in self.budgets_for_month(user_id, month)
        }

    def get_budget_page_data(
        self,
        user_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> BudgetPageData:
        """
        Данные страницы бюджета за месяц.

        Месяц берётся из (month, year) только если заданы оба, иначе текущий.
        total_spent - все расходы месяца (включая категории без бюджета),
        поэтому total_remaining может быть отрицательным.

        Raises:
            UserNotFoundError: неизвестный user_id
        """
        target = YearMonth.resolve(month, year)
        user = get_user_or_raise(self.db, user_id)

        budgets = self.budgets.list_for_month(user_id, target.year, target.month)
        totals = self._category_totals(user_id, target)

        budget_info = {Category(b.category): reconcile_budget(b, totals) for b in budgets}
        total_budget = total(b.amount for b in budgets)
        total_spent = total(totals.values())

        return BudgetPageData(
            user=user,
            budgets=budgets,
            budget_info=budget_info,
            all_categories=list(Category),
            categories_with_budgets={Category(b.category) for b in budgets},
            total_budget=total_budget,
            total_spent=total_spent,
            total_remaining=subtract(total_budget, total_spent),
            current_month=target,
            previous_month=target.previous,
            next_month=target.next,
            current_month_name=target.label,
        )


class CreateOrUpdateBudgetUseCase:
    """
    Upsert by (user, category, year, month): existing budget gets the new
    amount, otherwise a new one is created. Положительность суммы
    проверяется на входе (API), здесь - только формат.
    """

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)

    def execute(self, user_id: int, category, amount, month: int, year: int) -> BudgetModel:
        category = category if isinstance(category, Category) else parse_category(category)
        amount = parse_amount(amount, positive=False)
        target = YearMonth(year, month)
        get_user_or_raise(self.db, user_id)

        with unit_of_work(self.db):
            budget = self.budgets.find(user_id, category, target.year, target.month)
            if budget is not None:
                budget.amount = amount
            else:
                budget = BudgetModel(
                    user_id=user_id,
                    category=category.value,
                    year=target.year,
                    month=target.month,
                    amount=amount,
                )
            self.budgets.save(budget)

        logger.info("Budget %s %s for user_id=%s set to %s", category.value, target, user_id, amount)
        return budget


class DeleteBudgetUseCase:
    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)
        self.guard = OwnershipGuard(db)

    def execute(self, budget_id: int, user_id: int) -> None:
        budget = self.budgets.get(budget_id)
        if budget is None:
            raise NotFoundError(f"Бюджет #{budget_id} не найден")
        self.guard.check_budget(budget, user_id)

        with unit_of_work(self.db):
            self.budgets.delete(budget)
        logger.info("Budget #%s deleted by user_id=%s", budget_id, user_id)
