# app/repos/purchase_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from app.data.models.purchase import PurchaseModel


def _with_relations(stmt):
    return stmt.options(
        selectinload(PurchaseModel.items),
        selectinload(PurchaseModel.buyer),
        selectinload(PurchaseModel.seller),
    )


class PurchaseRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_purchase(self, purchase: PurchaseModel) -> PurchaseModel:
        self.db.add(purchase)
        self.db.flush()
        return purchase

    def get_purchase(self, purchase_id: int) -> PurchaseModel | None:
        return self.db.execute(
            _with_relations(select(PurchaseModel)).where(PurchaseModel.id == purchase_id)
        ).scalar_one_or_none()

    def _list(self, column, user_id: int, offset: int, limit: int) -> tuple[list[PurchaseModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(PurchaseModel).where(column == user_id)
        ).scalar_one()

        purchases = self.db.execute(
            _with_relations(select(PurchaseModel))
            .where(column == user_id)
            .order_by(PurchaseModel.created_at.desc(), PurchaseModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return list(purchases), total

    def list_by_buyer(self, buyer_id: int, offset: int, limit: int):
        return self._list(PurchaseModel.buyer_id, buyer_id, offset, limit)

    def list_by_seller(self, seller_id: int, offset: int, limit: int):
        return self._list(PurchaseModel.seller_id, seller_id, offset, limit)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
