"""
Transaction API endpoints
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from finwallet.api.deps import get_db, get_current_user_id
from finwallet.application.category_analytics import CategoryAggregator
from finwallet.application.transactions import (
    ProcessTransactionUseCase, DeleteTransactionUseCase, get_wallet_or_raise, wallet_summary,
)
from finwallet.domain.category import Category
from finwallet.domain.periods import YearMonth
from finwallet.domain.transaction import TransactionType
from finwallet.infrastructure.db.models import TransactionModel
from finwallet.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


# === Request/Response models ===

class CreateTransactionRequest(BaseModel):
    amount: str
    type: TransactionType
    category: Category
    description: str = Field(default="", max_length=255)
    date: Optional[datetime] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        """Валидация и нормализация суммы (точка/запятая, макс 2 знака)"""
        return validate_and_normalize_amount(v, max_decimal_places=2)


class TransactionResponse(BaseModel):
    transaction_id: int
    amount: str  # Decimal as string
    type: str
    category: str
    description: str
    date: datetime


class WalletResponse(BaseModel):
    wallet_id: int
    name: str
    currency: str
    balance: str
    income: str
    expense: str


def _to_response(tx: TransactionModel) -> TransactionResponse:
    return TransactionResponse(
        transaction_id=tx.id,
        amount=str(tx.amount),
        type=tx.operation_type,
        category=tx.category,
        description=tx.description,
        date=tx.occurred_at,
    )


# === Endpoints ===

@router.post("/", response_model=TransactionResponse)
def create_transaction(
    req: CreateTransactionRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Провести доход или расход по кошельку"""
    tx = ProcessTransactionUseCase(db).execute(
        user_id=user_id,
        operation_type=req.type,
        amount=req.amount,
        category=req.category,
        description=req.description,
        occurred_at=req.date,
    )
    return _to_response(tx)


@router.get("/", response_model=list[TransactionResponse])
def list_month_transactions(
    month: Optional[int] = None,
    year: Optional[int] = None,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Операции за месяц, свежие первыми"""
    wallet = get_wallet_or_raise(db, user_id)
    target = YearMonth.resolve(month, year)
    return [_to_response(t) for t in CategoryAggregator(db).month_transactions(wallet.id, target)]


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    DeleteTransactionUseCase(db).execute(transaction_id, user_id)


@router.get("/wallet", response_model=WalletResponse)
def get_wallet(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    summary = wallet_summary(get_wallet_or_raise(db, user_id))
    return WalletResponse(
        wallet_id=summary["wallet_id"],
        name=summary["name"],
        currency=summary["currency"],
        balance=str(summary["balance"]),
        income=str(summary["income"]),
        expense=str(summary["expense"]),
    )
