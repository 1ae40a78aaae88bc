#app/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.data.database import get_db
from app.data.models.user import UserModel
from app.domain.schemas import ItemIn, QuantityIn, CartOut
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user.id)


@router.post("/add", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).add_item(user.id, payload.product_id, payload.quantity)


@router.put("/update/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: QuantityIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).update_item_quantity(user.id, item_id, payload.quantity)


@router.delete("/remove/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(user.id, item_id)


@router.delete("/clear", response_model=CartOut)
def clear_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).clear(user.id)
