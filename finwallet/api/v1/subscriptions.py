"""
Subscription API endpoints
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from finwallet.api.deps import get_db, get_current_user_id
from finwallet.application.subscriptions import (
    CreateSubscriptionUseCase, UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    PaySubscriptionUseCase, list_active_subscriptions, list_paid_subscriptions_for_month,
    list_subscriptions,
)
from finwallet.domain.periods import YearMonth
from finwallet.domain.subscription import SubscriptionPeriod, SubscriptionType
from finwallet.infrastructure.db.models import SubscriptionModel
from finwallet.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


class SubscriptionRequest(BaseModel):
    name: str
    price: str
    period: SubscriptionPeriod = SubscriptionPeriod.MONTHLY
    type: SubscriptionType = SubscriptionType.DEFAULT
    expiry_on: date

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class SubscriptionResponse(BaseModel):
    id: int
    name: str
    price: str
    period: str
    type: str
    expiry_on: date
    paid_date: Optional[date]


def _to_response(sub: SubscriptionModel) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=sub.id,
        name=sub.name,
        price=str(sub.price),
        period=sub.period,
        type=sub.subscription_type,
        expiry_on=sub.expiry_on,
        paid_date=sub.paid_date,
    )


@router.get("/", response_model=list[SubscriptionResponse])
def get_subscriptions(
    include_paid: bool = False,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Активные (неоплаченные) подписки; include_paid=true - все подписки"""
    if include_paid:
        return [_to_response(s) for s in list_subscriptions(db, user_id)]
    return [_to_response(s) for s in list_active_subscriptions(db, user_id)]


@router.get("/paid", response_model=list[SubscriptionResponse])
def list_paid(
    month: Optional[int] = None,
    year: Optional[int] = None,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    target = YearMonth.resolve(month, year)
    return [_to_response(s) for s in list_paid_subscriptions_for_month(db, user_id, target)]


@router.post("/", response_model=SubscriptionResponse)
def create_subscription(
    req: SubscriptionRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    sub = CreateSubscriptionUseCase(db).execute(
        user_id=user_id,
        name=req.name,
        price=req.price,
        expiry_on=req.expiry_on,
        period=req.period,
        subscription_type=req.type,
    )
    return _to_response(sub)


@router.put("/{subscription_id}", response_model=SubscriptionResponse)
def edit_subscription(
    subscription_id: int,
    req: SubscriptionRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    sub = UpdateSubscriptionUseCase(db).execute(
        subscription_id,
        user_id,
        name=req.name,
        price=req.price,
        period=req.period,
        subscription_type=req.type,
        expiry_on=req.expiry_on,
    )
    return _to_response(sub)


@router.post("/{subscription_id}/pay", response_model=SubscriptionResponse)
def pay_subscription(
    subscription_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Оплатить подписку с кошелька"""
    return _to_response(PaySubscriptionUseCase(db).execute(subscription_id, user_id))


@router.delete("/{subscription_id}", status_code=204)
def delete_subscription(
    subscription_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    DeleteSubscriptionUseCase(db).execute(subscription_id, user_id)
