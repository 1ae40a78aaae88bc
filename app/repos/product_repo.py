# app/repos/product_repo.py
from typing import Iterable

from sqlalchemy import select, update, func, or_
from sqlalchemy.orm import Session, selectinload

from app.data.models.product import ProductModel
from app.utils.settings import CATALOG_PAGE_LIMIT

SORT_FIELDS = {
    "created_at": ProductModel.created_at,
    "price": ProductModel.price,
    "views": ProductModel.views,
    "title": ProductModel.title,
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .options(selectinload(ProductModel.seller))
            .where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def get_products(self, product_ids: Iterable[int]) -> dict[int, ProductModel]:
        ids = list(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProductModel)
            .options(selectinload(ProductModel.seller))
            .where(ProductModel.id.in_(ids))
        ).scalars().all()
        return {p.id: p for p in rows}

    def find_many(
        self,
        search: str | None = None,
        category: str | None = None,
        condition: str | None = None,
        min_price=None,
        max_price=None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        offset: int = 0,
        limit: int = CATALOG_PAGE_LIMIT,
    ) -> tuple[list[ProductModel], int]:
        conditions = [ProductModel.is_available.is_(True)]

        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(ProductModel.title.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        if category:
            conditions.append(ProductModel.category == category)
        if condition:
            conditions.append(ProductModel.condition == condition)
        if min_price is not None:
            conditions.append(ProductModel.price >= min_price)
        if max_price is not None:
            conditions.append(ProductModel.price <= max_price)

        column = SORT_FIELDS.get(sort_by, ProductModel.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        tie = ProductModel.id.asc() if sort_order == "asc" else ProductModel.id.desc()

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*conditions)
        ).scalar_one()

        products = self.db.execute(
            select(ProductModel)
            .options(selectinload(ProductModel.seller))
            .where(*conditions)
            .order_by(ordering, tie)
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return list(products), total

    def find_by_seller(self, seller_id: int, offset: int, limit: int) -> tuple[list[ProductModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(ProductModel.seller_id == seller_id)
        ).scalar_one()

        products = self.db.execute(
            select(ProductModel)
            .options(selectinload(ProductModel.seller))
            .where(ProductModel.seller_id == seller_id)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return list(products), total

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def increment_views(self, product_id: int) -> None:
        self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(views=ProductModel.views + 1)
            .execution_options(synchronize_session=False)
        )

    def reserve(self, product_ids: list[int]) -> int:
        """
        Warunkowy update: ustawia is_available=False tylko dla produktow,
        ktore nadal sa dostepne. Zwraca liczbe zmienionych wierszy,
        mniej niz len(product_ids) oznacza ze ktos nas wyprzedzil.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id.in_(product_ids), ProductModel.is_available.is_(True))
            .values(is_available=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_availability(self, product_ids: list[int], available: bool) -> int:
        if not product_ids:
            return 0
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id.in_(product_ids))
            .values(is_available=available)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()
