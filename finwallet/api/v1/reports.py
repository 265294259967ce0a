"""
Dashboard / monthly report API endpoints (JSON only)
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from finwallet.api.deps import get_db, get_current_user_id
from finwallet.application.reports import build_dashboard, build_monthly_report
from finwallet.domain.periods import YearMonth


router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


class TopCategoryResponse(BaseModel):
    category: str
    name: str
    total_amount: str
    percent: int


class ExpenseResponse(BaseModel):
    transaction_id: int
    amount: str
    category: str
    description: str
    date: datetime


class DashboardResponse(BaseModel):
    balance: str
    income: str
    expense: str
    month_income: str
    month_expense: str
    top_categories: list[TopCategoryResponse]
    active_subscriptions: int
    latest_transactions: list[ExpenseResponse]


class MonthlyReportResponse(BaseModel):
    month: str
    category_names: list[str]
    category_percents: list[int]
    category_amounts: list[str]
    biggest_expense: Optional[ExpenseResponse]
    biggest_expense_name: Optional[str]
    current_month_expenses: str
    current_month_income: str
    subscription_expenses: str
    expense_history: dict[str, str]
    paid_subscriptions: list[str]


def _expense(tx) -> ExpenseResponse:
    return ExpenseResponse(
        transaction_id=tx.id,
        amount=str(tx.amount),
        category=tx.category,
        description=tx.description,
        date=tx.occurred_at,
    )


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    data = build_dashboard(db, user_id)
    return DashboardResponse(
        balance=str(data.wallet.balance),
        income=str(data.wallet.income),
        expense=str(data.wallet.expense),
        month_income=str(data.month_income),
        month_expense=str(data.month_expense),
        top_categories=[
            TopCategoryResponse(
                category=c.category.value,
                name=c.name,
                total_amount=str(c.total_amount),
                percent=c.percent,
            )
            for c in data.top_categories
        ],
        active_subscriptions=len(data.active_subscriptions),
        latest_transactions=[_expense(t) for t in data.latest_transactions],
    )


@router.get("/monthly", response_model=MonthlyReportResponse)
def monthly_report(
    month: Optional[int] = None,
    year: Optional[int] = None,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Данные месячного отчёта (расходы включают оплаченные подписки)"""
    report = build_monthly_report(db, user_id, YearMonth.resolve(month, year))
    return MonthlyReportResponse(
        month=str(report.month),
        category_names=report.category_names,
        category_percents=report.category_percents,
        category_amounts=[str(a) for a in report.category_amounts],
        biggest_expense=_expense(report.biggest_expense) if report.biggest_expense else None,
        biggest_expense_name=report.biggest_expense_name,
        current_month_expenses=str(report.total_expenses),
        current_month_income=str(report.total_income),
        subscription_expenses=str(report.subscription_expenses),
        expense_history={k: str(v) for k, v in report.expense_history.items()},
        paid_subscriptions=[s.name for s in report.paid_subscriptions],
    )
