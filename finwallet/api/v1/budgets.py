"""
Budget API endpoints
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from finwallet.api.deps import get_db, get_current_user_id
from finwallet.application.budget import (
    BudgetReconciler, CreateOrUpdateBudgetUseCase, DeleteBudgetUseCase,
)
from finwallet.domain.category import Category
from finwallet.domain.errors import ValidationError
from finwallet.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/budgets", tags=["budgets"])


class BudgetRequest(BaseModel):
    category: Category
    amount: str
    month: int
    year: int

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        """Бюджет - минимум 0.01"""
        normalized = validate_and_normalize_amount(v, max_decimal_places=2)
        if Decimal(normalized) < Decimal("0.01"):
            raise ValidationError("Сумма бюджета должна быть больше нуля")
        return normalized


class BudgetResponse(BaseModel):
    id: int
    category: str
    amount: str
    month: int
    year: int


class BudgetInfoResponse(BaseModel):
    budget: BudgetResponse
    spent: str
    remaining: str
    percentage: str
    is_over_budget: bool


class BudgetPageResponse(BaseModel):
    month: str
    month_name: str
    previous_month: str
    next_month: str
    budgets: list[BudgetInfoResponse]
    all_categories: list[str]
    categories_with_budgets: list[str]
    total_budget: str
    total_spent: str
    total_remaining: str


def _budget_response(budget) -> BudgetResponse:
    return BudgetResponse(
        id=budget.id,
        category=budget.category,
        amount=str(budget.amount),
        month=budget.month,
        year=budget.year,
    )


@router.get("/", response_model=BudgetPageResponse)
def budget_page(
    month: Optional[int] = None,
    year: Optional[int] = None,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Бюджеты месяца с фактом расходов"""
    data = BudgetReconciler(db).get_budget_page_data(user_id, month, year)
    return BudgetPageResponse(
        month=str(data.current_month),
        month_name=data.current_month_name,
        previous_month=str(data.previous_month),
        next_month=str(data.next_month),
        budgets=[
            BudgetInfoResponse(
                budget=_budget_response(info.budget),
                spent=str(info.spent),
                remaining=str(info.remaining),
                percentage=str(info.percentage),
                is_over_budget=info.is_over_budget,
            )
            for info in data.budget_info.values()
        ],
        all_categories=[c.value for c in data.all_categories],
        categories_with_budgets=sorted(c.value for c in data.categories_with_budgets),
        total_budget=str(data.total_budget),
        total_spent=str(data.total_spent),
        total_remaining=str(data.total_remaining),
    )


@router.post("/", response_model=BudgetResponse)
def save_budget(
    req: BudgetRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Создать или обновить бюджет категории на месяц"""
    budget = CreateOrUpdateBudgetUseCase(db).execute(
        user_id=user_id,
        category=req.category,
        amount=req.amount,
        month=req.month,
        year=req.year,
    )
    return _budget_response(budget)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(
    budget_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    DeleteBudgetUseCase(db).execute(budget_id, user_id)
