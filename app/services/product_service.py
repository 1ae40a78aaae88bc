# app/services/product_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.enums import Category
from app.domain.errors import NotFoundError, ForbiddenError
from app.domain.pagination import page_window, pagination
from app.domain.schemas import ProductCreate, ProductUpdate
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger
from app.utils.settings import CATALOG_PAGE_LIMIT

logger = get_logger(__name__)

NULLABLE_FIELDS = {"location"}


def seller_to_dict(user) -> Dict[str, Any] | None:
    if user is None:
        return None
    return {"id": user.id, "username": user.username}


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "category": product.category,
        "condition": product.condition,
        "price": product.price,
        "images": product.images or [],
        "location": product.location,
        "tags": product.tags or [],
        "is_available": product.is_available,
        "views": product.views,
        "seller": seller_to_dict(product.seller),
        "created_at": product.created_at,
    }


def _plain(value):
    # enumy z pydantica -> wartosci zapisywane w bazie
    return getattr(value, "value", value)


class ProductService:
    """
    Katalog produktow: odczyt (lista z filtrami, szczegoly) i CRUD sprzedawcy.
    Checkout korzysta tylko z odczytu i zmiany dostepnosci.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #query
    def list_products(
        self,
        page: int = 1,
        limit: int = CATALOG_PAGE_LIMIT,
        search: str | None = None,
        category: Category | str | None = None,
        condition: str | None = None,
        min_price=None,
        max_price=None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        offset, limit = page_window(page, limit)

        products, total = self.repo.find_many(
            search=search,
            category=_plain(category),
            condition=_plain(condition),
            min_price=min_price,
            max_price=max_price,
            sort_by=sort_by,
            sort_order=sort_order,
            offset=offset,
            limit=limit,
        )

        return {
            "products": [product_to_dict(p) for p in products],
            "pagination": pagination(page, limit, total),
        }

    def list_by_seller(self, seller_id: int, page: int = 1, limit: int = CATALOG_PAGE_LIMIT) -> Dict[str, Any]:
        offset, limit = page_window(page, limit)
        products, total = self.repo.find_by_seller(seller_id, offset, limit)
        return {
            "products": [product_to_dict(p) for p in products],
            "pagination": pagination(page, limit, total),
        }

    def get_product(self, product_id: int, count_view: bool = False) -> Dict[str, Any]:
        if count_view:
            self.repo.increment_views(product_id)
            self.repo.commit()

        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        return product_to_dict(product)

    @staticmethod
    def categories() -> list[str]:
        return [c.value for c in Category]

    #commands
    def create_product(self, seller_id: int, payload: ProductCreate) -> Dict[str, Any]:
        product = ProductModel(
            seller_id=seller_id,
            title=payload.title,
            description=payload.description,
            category=payload.category.value,
            condition=payload.condition.value,
            price=payload.price,
            images=list(payload.images),
            location=payload.location,
            tags=list(payload.tags),
            is_available=True,
            views=0,
        )
        self.repo.add(product)
        self.repo.commit()

        logger.info(f"Seller {seller_id} listed product {product.id}")
        return self.get_product(product.id)

    def update_product(self, product_id: int, seller_id: int, payload: ProductUpdate) -> Dict[str, Any]:
        product = self._owned_product(product_id, seller_id, "update")

        for field, value in payload.model_dump(exclude_unset=True).items():
            #null dozwolony tylko dla pol opcjonalnych w modelu
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(product, field, _plain(value))

        self.repo.commit()

        logger.info(f"Product {product_id} updated by seller {seller_id}")
        return self.get_product(product_id)

    def delete_product(self, product_id: int, seller_id: int) -> None:
        product = self._owned_product(product_id, seller_id, "delete")
        self.repo.delete(product)
        self.repo.commit()

        logger.info(f"Product {product_id} deleted by seller {seller_id}")

    def update_availability(self, product_ids: list[int], available: bool) -> int:
        updated = self.repo.update_availability(product_ids, available)
        self.repo.commit()
        return updated

    def _owned_product(self, product_id: int, seller_id: int, action: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if product.seller_id != seller_id:
            raise ForbiddenError(f"Not authorized to {action} this product")
        return product
