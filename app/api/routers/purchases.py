# app/api/routers/purchases.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_lock_service
from app.data.database import get_db
from app.data.models.user import UserModel
from app.domain.schemas import CheckoutIn, PurchaseCheckoutOut, PurchaseOut, PurchasePage, StatusIn
from app.services.checkout_service import CheckoutService
from app.services.lock_service import LockService
from app.services.purchase_service import PurchaseService
from app.utils.settings import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.post("/checkout", response_model=PurchaseCheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Checkout koszyka, jeden zakup na kazdego sprzedawce.
    """
    return CheckoutService(db, lock_service).checkout_purchases(user.id, payload)


@router.get("/history", response_model=PurchasePage)
def purchase_history(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PurchaseService(db).list_history(user.id, page, limit)


@router.get("/sales", response_model=PurchasePage)
def sales_history(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PurchaseService(db).list_sales(user.id, page, limit)


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_purchase(
    purchase_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PurchaseService(db).get_purchase(purchase_id, user.id)


@router.put("/{purchase_id}/status", response_model=PurchaseOut)
def update_purchase_status(
    purchase_id: int,
    payload: StatusIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PurchaseService(db).update_status(purchase_id, user.id, payload.status)
