from decimal import Decimal

import pytest

from app.data.models import ProductModel
from app.domain.enums import OrderStatus
from app.domain.errors import ForbiddenError, InvalidStateError, NotFoundError
from app.domain.status import check_transition
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.order_service import OrderService
from app.services.purchase_service import PurchaseService


@pytest.fixture
def seller(make_user):
    return make_user("seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture
def place_order(db, lock_service, notifications, seller, make_product, order_checkout):
    def _place(buyer, title="Item", price="10.00"):
        product_id = make_product(seller, title, price).id
        CartService(db).add_item(buyer.id, product_id)
        order = CheckoutService(db, lock_service, notifications).checkout_order(buyer.id, order_checkout())
        return order, product_id

    return _place


@pytest.fixture
def place_purchase(db, lock_service, notifications, seller, make_product, purchase_checkout):
    def _place(buyer, title="Item", price="10.00"):
        product_id = make_product(seller, title, price).id
        CartService(db).add_item(buyer.id, product_id)
        result = CheckoutService(db, lock_service, notifications).checkout_purchases(
            buyer.id, purchase_checkout()
        )
        return result["purchases"][0], product_id

    return _place


@pytest.mark.parametrize(
    "current,target",
    [
        ("Pending", "Confirmed"),
        ("Pending", "Cancelled"),
        ("Confirmed", "Shipped"),
        ("Confirmed", "Cancelled"),
        ("Shipped", "Delivered"),
    ],
)
def test_allowed_transitions(current, target):
    assert check_transition(current, target) is True


@pytest.mark.parametrize(
    "current,target",
    [
        ("Pending", "Shipped"),
        ("Pending", "Delivered"),
        ("Shipped", "Cancelled"),
        ("Delivered", "Pending"),
        ("Cancelled", "Confirmed"),
    ],
)
def test_disallowed_transitions(current, target):
    with pytest.raises(InvalidStateError):
        check_transition(current, target)


def test_same_status_is_a_noop():
    assert check_transition(OrderStatus.SHIPPED, OrderStatus.SHIPPED) is False


def test_list_orders_newest_first_with_pagination(db, buyer, place_order):
    first, _ = place_order(buyer, "One")
    second, _ = place_order(buyer, "Two")
    third, _ = place_order(buyer, "Three")

    page = OrderService(db).list_orders(buyer.id, page=1, limit=2)

    assert [o["id"] for o in page["orders"]] == [third["id"], second["id"]]
    assert page["pagination"] == {"current_page": 1, "total_pages": 2, "total": 3}

    rest = OrderService(db).list_orders(buyer.id, page=2, limit=2)
    assert [o["id"] for o in rest["orders"]] == [first["id"]]


def test_get_order_only_for_buyer(db, buyer, seller, place_order):
    order, _ = place_order(buyer)
    svc = OrderService(db)

    assert svc.get_order(order["id"], buyer.id)["total_amount"] == Decimal("10.00")
    with pytest.raises(ForbiddenError):
        svc.get_order(order["id"], seller.id)
    with pytest.raises(NotFoundError):
        svc.get_order(9999, buyer.id)


def test_buyer_moves_order_through_lifecycle(db, buyer, place_order, notifications):
    order, _ = place_order(buyer)
    svc = OrderService(db, notifications)

    for status in ("Confirmed", "Shipped", "Delivered"):
        assert svc.update_status(order["id"], buyer.id, status)["status"] == status

    with pytest.raises(InvalidStateError):
        svc.update_status(order["id"], buyer.id, "Cancelled")
    assert ("status", buyer.id, "order", order["id"], "Delivered") in notifications.sent


def test_only_buyer_updates_order_status(db, buyer, seller, place_order):
    order, _ = place_order(buyer)

    with pytest.raises(ForbiddenError):
        OrderService(db).update_status(order["id"], seller.id, "Confirmed")


def test_cancelling_order_restores_availability(db, buyer, place_order):
    order, product_id = place_order(buyer)

    cancelled = OrderService(db).update_status(order["id"], buyer.id, "Cancelled")

    assert cancelled["status"] == "Cancelled"
    db.expire_all()
    assert db.get(ProductModel, product_id).is_available is True


def test_purchase_visible_to_buyer_and_seller_only(db, buyer, seller, make_user, place_purchase):
    purchase, _ = place_purchase(buyer)
    svc = PurchaseService(db)

    assert svc.get_purchase(purchase["id"], buyer.id)["id"] == purchase["id"]
    assert svc.get_purchase(purchase["id"], seller.id)["id"] == purchase["id"]
    with pytest.raises(ForbiddenError):
        svc.get_purchase(purchase["id"], make_user("stranger").id)


def test_history_and_sales(db, buyer, seller, place_purchase):
    purchase, _ = place_purchase(buyer)
    svc = PurchaseService(db)

    history = svc.list_history(buyer.id)
    sales = svc.list_sales(seller.id)

    assert [p["id"] for p in history["purchases"]] == [purchase["id"]]
    assert [p["id"] for p in sales["purchases"]] == [purchase["id"]]
    assert svc.list_sales(buyer.id)["pagination"]["total"] == 0


def test_only_seller_updates_purchase_status(db, buyer, seller, place_purchase):
    purchase, product_id = place_purchase(buyer)
    svc = PurchaseService(db)

    with pytest.raises(ForbiddenError):
        svc.update_status(purchase["id"], buyer.id, "Confirmed")

    assert svc.update_status(purchase["id"], seller.id, "Confirmed")["status"] == "Confirmed"
    assert svc.update_status(purchase["id"], seller.id, "Cancelled")["status"] == "Cancelled"
    db.expire_all()
    assert db.get(ProductModel, product_id).is_available is True
