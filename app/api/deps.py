# app/api/deps.py
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.data.models.user import UserModel
from app.services.lock_service import LockService


def get_current_user(
    x_user_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Tozsamosc rozwiazuje zewnetrzny serwis auth, tu dostajemy tylko id
    w naglowku X-User-Id. Brak albo nieznany user -> 401.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.get(UserModel, x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def get_lock_service() -> LockService:
    return LockService()
