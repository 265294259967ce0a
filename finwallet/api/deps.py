"""
FastAPI dependencies (DB session, current user)
"""
from fastapi import Depends, Request, HTTPException, status
from sqlalchemy.orm import Session

from finwallet.infrastructure.db.session import get_db as _get_db
from finwallet.infrastructure.db.repositories import UserRepository


# Re-export get_db для удобства
get_db = _get_db


def get_current_user_id(request: Request, db: Session = Depends(get_db)) -> int:
    """
    ID текущего пользователя из session (логин выполняется вне этого сервиса)

    Raises:
        HTTPException(401): если не залогинен или пользователь удалён

    Usage:
        @router.get("/budgets")
        def budget_page(user_id: int = Depends(get_current_user_id)):
            ...
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    if not UserRepository(db).exists(user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return user_id
