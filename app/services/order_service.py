# app/services/order_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.enums import OrderStatus
from app.domain.errors import NotFoundError, ForbiddenError
from app.domain.pagination import page_window, pagination
from app.domain.status import check_transition
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.notification_service import NotificationService
from app.services.product_service import seller_to_dict
from app.utils.logging import get_logger
from app.utils.settings import DEFAULT_PAGE_LIMIT

logger = get_logger(__name__)


def address_to_dict(record) -> Dict[str, str]:
    return {
        "street": record.address_street,
        "city": record.address_city,
        "state": record.address_state,
        "pincode": record.address_pincode,
    }


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "title": i.title,
                "price": i.price,
                "quantity": i.quantity,
                "seller": seller_to_dict(i.seller),
            }
            for i in order.items
        ],
        "address": address_to_dict(order),
        "location": order.location,
        "payment_method": order.payment_method,
        "status": order.status,
        "total_amount": order.total_amount,
        "notes": order.notes,
        "created_at": order.created_at,
    }


class OrderService:
    """
    Serwis odpowiedzialny za historie i status zamowien.
    Tworzenie zamowien jest w CheckoutService.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()

    def list_orders(self, user_id: int, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Dict[str, Any]:
        offset, limit = page_window(page, limit)
        orders, total = self.repo.list_by_user(user_id, offset, limit)
        return {
            "orders": [order_to_dict(o) for o in orders],
            "pagination": pagination(page, limit, total),
        }

    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamowienia (Query), tylko kupujacy.
        """
        return order_to_dict(self._owned_order(order_id, user_id, "view"))

    def update_status(self, order_id: int, user_id: int, status: OrderStatus | str) -> Dict[str, Any]:
        """
        Zmiana statusu przez kupujacego, zgodnie z tabela przejsc.
        Anulowanie przywraca dostepnosc produktow w tej samej transakcji.
        """
        order = self._owned_order(order_id, user_id, "update")
        status = OrderStatus(status)

        if not check_transition(order.status, status):
            return order_to_dict(order)

        try:
            order.status = status.value
            if status == OrderStatus.CANCELLED:
                restored = self.products.update_availability([i.product_id for i in order.items], True)
                logger.info(f"Order {order_id} cancelled, {restored} products available again")
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id} status -> {status.value}")
        self.notification_service.send_status_notification(user_id, "order", order_id, status.value)

        return order_to_dict(self.repo.get_order(order_id))

    def _owned_order(self, order_id: int, user_id: int, action: str) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != user_id:
            raise ForbiddenError(f"Not authorized to {action} this order")
        return order
