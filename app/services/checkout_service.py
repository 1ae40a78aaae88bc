# app/services/checkout_service.py
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, OrderItemModel
from app.data.models.purchase import PurchaseModel, PurchaseItemModel
from app.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from app.domain.schemas import CheckoutIn, DirectItemIn, OrderCheckoutIn
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.repos.purchase_repo import PurchaseRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import order_to_dict
from app.services.purchase_service import purchase_to_dict
from app.utils.logging import get_logger
from app.utils.settings import CHECKOUT_LOCK_TTL_SECONDS

logger = get_logger(__name__)


def line_total(line: Dict[str, Any]) -> Decimal:
    return line["price"] * line["quantity"]


def lines_total(lines: List[Dict[str, Any]]) -> Decimal:
    return sum((line_total(line) for line in lines), Decimal("0.00"))


def group_by_seller(lines: List[Dict[str, Any]]) -> Dict[int, List[Dict[str, Any]]]:
    """Grupy w kolejnosci pierwszego wystapienia sprzedawcy w koszyku."""
    groups: Dict[int, List[Dict[str, Any]]] = {}
    for line in lines:
        groups.setdefault(line["seller_id"], []).append(line)
    return groups


class CheckoutService:
    """
    Checkout koszyka albo "kup teraz" -> zamowienie / zakupy per sprzedawca.

    Caly checkout to jedna transakcja:
    1. walidacja i snapshot produktow (tytul, cena, sprzedawca)
    2. warunkowy update dostepnosci (tylko is_available = true)
    3. zapis zamowienia / zakupow i czyszczenie koszyka
    4. commit, przy jakimkolwiek bledzie rollback calosci

    Dodatkowo lock w redisie per kupujacy, zeby podwojny submit tego samego
    koszyka nie szedl rownolegle.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.purchases = PurchaseRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # ORDER (Mode A: koszyk, Mode A': kup teraz)
    # =====================================================
    def checkout_order(self, user_id: int, payload: OrderCheckoutIn) -> Dict[str, Any]:
        direct = bool(payload.products)

        with self._checkout_lock(user_id):
            try:
                if direct:
                    cart_id = None
                    lines = self._direct_lines(user_id, payload.products)
                else:
                    cart_id, lines = self._cart_lines(user_id)

                total = lines_total(lines)

                if direct and payload.total_amount is not None and payload.total_amount != total:
                    logger.warning(
                        f"Client total {payload.total_amount} differs from computed {total} "
                        f"for user {user_id}, using computed"
                    )

                self._reserve(lines)

                order = OrderModel(
                    user_id=user_id,
                    status="Pending",
                    total_amount=total,
                    notes=payload.notes,
                    **self._shipping_fields(payload),
                    items=[
                        OrderItemModel(
                            product_id=line["product_id"],
                            title=line["title"],
                            price=line["price"],
                            quantity=line["quantity"],
                            seller_id=line["seller_id"],
                        )
                        for line in lines
                    ],
                )
                self.orders.add_order(order)

                if cart_id is not None:
                    self.carts.clear_items(cart_id)

                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        order_id = order.id
        logger.info(
            f"Order {order_id} placed by user {user_id} "
            f"({'buy now' if direct else 'cart'}, {len(lines)} items, total {total})"
        )
        self.notification_service.send_order_notification(user_id, order_id)

        return order_to_dict(self.orders.get_order(order_id))

    # =====================================================
    # PURCHASES (Mode B: podzial per sprzedawca)
    # =====================================================
    def checkout_purchases(self, user_id: int, payload: CheckoutIn) -> Dict[str, Any]:
        with self._checkout_lock(user_id):
            try:
                cart_id, lines = self._cart_lines(user_id)
                total = lines_total(lines)

                self._reserve(lines)

                created = []
                for seller_id, group in group_by_seller(lines).items():
                    purchase = PurchaseModel(
                        buyer_id=user_id,
                        seller_id=seller_id,
                        status="Pending",
                        total_amount=lines_total(group),
                        notes=payload.notes,
                        **self._shipping_fields(payload),
                        items=[
                            PurchaseItemModel(
                                product_id=line["product_id"],
                                title=line["title"],
                                price=line["price"],
                                quantity=line["quantity"],
                            )
                            for line in group
                        ],
                    )
                    self.purchases.add_purchase(purchase)
                    created.append(purchase)

                #koszyk czyszczony raz, po zapisaniu wszystkich grup
                self.carts.clear_items(cart_id)

                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        refs = [(p.id, p.seller_id) for p in created]
        logger.info(
            f"Checkout for user {user_id}: {len(refs)} purchases, total {total}"
        )
        for purchase_id, seller_id in refs:
            self.notification_service.send_sale_notification(seller_id, purchase_id)

        return {
            "purchases": [purchase_to_dict(self.purchases.get_purchase(pid)) for pid, _ in refs],
            "total_amount": total,
        }

    # =====================================================
    # helpers
    # =====================================================
    @contextmanager
    def _checkout_lock(self, user_id: int):
        token = self.lock_service.acquire_checkout_lock(user_id, CHECKOUT_LOCK_TTL_SECONDS)
        if not token:
            raise ConflictError("Checkout already in progress")

        try:
            yield
        finally:
            try:
                self.lock_service.release_checkout_lock(user_id, token)
            except Exception as e:
                # lock i tak wygasnie po TTL
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    def _cart_lines(self, user_id: int):
        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []

        if not items:
            raise InvalidStateError("Cart is empty")

        products = self.products.get_products([i.product_id for i in items])

        lines = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                # produkt usuniety przez sprzedawce po dodaniu do koszyka
                raise InvalidStateError("Product not available")
            self._check_purchasable(product, user_id)
            lines.append(self._snapshot(product, item.quantity))

        return cart.id, lines

    def _direct_lines(self, user_id: int, selection: List[DirectItemIn]):
        ids = [s.product_id for s in selection]
        if len(set(ids)) != len(ids):
            raise InvalidInputError("Duplicate products in selection")

        products = self.products.get_products(ids)

        lines = []
        for entry in selection:
            product = products.get(entry.product_id)
            if product is None:
                raise NotFoundError(f"Product {entry.product_id} not found")
            self._check_purchasable(product, user_id)
            lines.append(self._snapshot(product, entry.quantity))

        return lines

    @staticmethod
    def _check_purchasable(product, user_id: int) -> None:
        if not product.is_available:
            raise InvalidStateError(f"Product not available: {product.title}")

        if product.seller_id == user_id:
            raise ForbiddenError("Cannot buy your own product")

    @staticmethod
    def _snapshot(product, quantity: int) -> Dict[str, Any]:
        #snapshot w momencie zakupu, pozniejsze zmiany produktu go nie ruszaja
        return {
            "product_id": product.id,
            "title": product.title,
            "price": product.price,
            "quantity": quantity,
            "seller_id": product.seller_id,
        }

    def _reserve(self, lines: List[Dict[str, Any]]) -> None:
        ids = [line["product_id"] for line in lines]
        reserved = self.products.reserve(ids)

        #np. UPDATE ... SET is_available=false WHERE id IN (1,2) AND is_available=true
        #mniej wierszy niz produktow = ktos kupil rownolegle
        if reserved != len(ids):
            raise ConflictError("Product was just purchased by another buyer")

    @staticmethod
    def _shipping_fields(payload: CheckoutIn) -> Dict[str, Any]:
        return {
            "address_street": payload.address.street,
            "address_city": payload.address.city,
            "address_state": payload.address.state,
            "address_pincode": payload.address.pincode,
            "location": payload.location,
            "payment_method": payload.payment_method.value,
        }
