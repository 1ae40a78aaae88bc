# app/api/routers/products.py
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.data.database import get_db
from app.data.models.user import UserModel
from app.domain.enums import Category, Condition
from app.domain.schemas import ProductCreate, ProductUpdate, ProductOut, ProductPage
from app.services.product_service import ProductService
from app.utils.settings import CATALOG_PAGE_LIMIT, MAX_PAGE_LIMIT

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(CATALOG_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    search: Optional[str] = None,
    category: Optional[Category] = None,
    condition: Optional[Condition] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    sort_by: Literal["created_at", "price", "views", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(
        page=page,
        limit=limit,
        search=search,
        category=category,
        condition=condition,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/categories", response_model=List[str])
def list_categories():
    return ProductService.categories()


@router.get("/user/{user_id}", response_model=ProductPage)
def list_seller_products(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(CATALOG_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_by_seller(user_id, page, limit)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    """
    Szczegoly produktu, kazde wyswietlenie zwieksza licznik views.
    """
    return ProductService(db).get_product(product_id, count_view=True)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ProductService(db).create_product(user.id, payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ProductService(db).update_product(product_id, user.id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ProductService(db).delete_product(product_id, user.id)
    return Response(status_code=204)
