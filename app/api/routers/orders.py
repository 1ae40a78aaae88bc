# app/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_lock_service
from app.data.database import get_db
from app.data.models.user import UserModel
from app.domain.schemas import OrderCheckoutIn, OrderOut, OrderPage, StatusIn
from app.services.checkout_service import CheckoutService
from app.services.lock_service import LockService
from app.services.order_service import OrderService
from app.utils.settings import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: OrderCheckoutIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Tworzy zamowienie z koszyka, albo z listy `products` ("kup teraz").
    Wysyla powiadomienie asynchronicznie.
    """
    return CheckoutService(db, lock_service).checkout_order(user.id, payload)


@router.get("/", response_model=OrderPage)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_orders(user.id, page, limit)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderService(db).get_order(order_id, user.id)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: StatusIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderService(db).update_status(order_id, user.id, payload.status)
