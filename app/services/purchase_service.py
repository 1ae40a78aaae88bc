# app/services/purchase_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.models.purchase import PurchaseModel
from app.domain.enums import OrderStatus
from app.domain.errors import NotFoundError, ForbiddenError
from app.domain.pagination import page_window, pagination
from app.domain.status import check_transition
from app.repos.product_repo import ProductRepo
from app.repos.purchase_repo import PurchaseRepo
from app.services.notification_service import NotificationService
from app.services.order_service import address_to_dict
from app.services.product_service import seller_to_dict
from app.utils.logging import get_logger
from app.utils.settings import DEFAULT_PAGE_LIMIT

logger = get_logger(__name__)


def purchase_to_dict(purchase: PurchaseModel) -> Dict[str, Any]:
    return {
        "id": purchase.id,
        "buyer": seller_to_dict(purchase.buyer),
        "seller": seller_to_dict(purchase.seller),
        "items": [
            {
                "product_id": i.product_id,
                "title": i.title,
                "price": i.price,
                "quantity": i.quantity,
            }
            for i in purchase.items
        ],
        "address": address_to_dict(purchase),
        "location": purchase.location,
        "payment_method": purchase.payment_method,
        "status": purchase.status,
        "total_amount": purchase.total_amount,
        "notes": purchase.notes,
        "created_at": purchase.created_at,
    }


class PurchaseService:
    """
    Zakupy per (kupujacy, sprzedawca): historia kupujacego, sprzedaz
    sprzedawcy, podglad i zmiana statusu przez sprzedawce.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = PurchaseRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()

    def list_history(self, buyer_id: int, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Dict[str, Any]:
        offset, limit = page_window(page, limit)
        purchases, total = self.repo.list_by_buyer(buyer_id, offset, limit)
        return {
            "purchases": [purchase_to_dict(p) for p in purchases],
            "pagination": pagination(page, limit, total),
        }

    def list_sales(self, seller_id: int, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Dict[str, Any]:
        offset, limit = page_window(page, limit)
        purchases, total = self.repo.list_by_seller(seller_id, offset, limit)
        return {
            "purchases": [purchase_to_dict(p) for p in purchases],
            "pagination": pagination(page, limit, total),
        }

    def get_purchase(self, purchase_id: int, user_id: int) -> Dict[str, Any]:
        purchase = self._get(purchase_id)

        #podglad: kupujacy albo sprzedawca
        if user_id not in (purchase.buyer_id, purchase.seller_id):
            raise ForbiddenError("Not authorized to view this purchase")

        return purchase_to_dict(purchase)

    def update_status(self, purchase_id: int, user_id: int, status: OrderStatus | str) -> Dict[str, Any]:
        purchase = self._get(purchase_id)

        if purchase.seller_id != user_id:
            raise ForbiddenError("Not authorized to update this purchase")

        status = OrderStatus(status)
        if not check_transition(purchase.status, status):
            return purchase_to_dict(purchase)

        try:
            purchase.status = status.value
            if status == OrderStatus.CANCELLED:
                self.products.update_availability([i.product_id for i in purchase.items], True)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Purchase {purchase_id} status -> {status.value}")
        self.notification_service.send_status_notification(
            purchase.buyer_id, "purchase", purchase_id, status.value
        )

        return purchase_to_dict(self.repo.get_purchase(purchase_id))

    def _get(self, purchase_id: int) -> PurchaseModel:
        purchase = self.repo.get_purchase(purchase_id)
        if not purchase:
            raise NotFoundError("Purchase not found")
        return purchase
