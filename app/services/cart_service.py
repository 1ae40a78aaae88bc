from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import NotFoundError, InvalidInputError, InvalidStateError, ForbiddenError
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.product_service import seller_to_dict
from app.utils.logging import get_logger

logger = get_logger(__name__)


def coerce_quantity(value) -> int:
    #ilosc musi byc dodatnia liczba calkowita po konwersji
    if isinstance(value, bool):
        raise InvalidInputError("Valid quantity is required")
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError("Valid quantity is required")

    if quantity < 1:
        raise InvalidInputError("Valid quantity is required")
    return quantity


class CartService:
    """
    Use case'y dla domeny cart, jeden koszyk na uzytkownika
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt, koszyk tworzony leniwie
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create_cart(user_id)
        return self._cart_view(cart)

    def get_or_create_cart(self, user_id: int) -> CartModel:
        existing = self.repo.get_cart_by_user(user_id)
        if existing:
            return existing

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id))
        except IntegrityError:
            #rownolegly request zdazyl utworzyc koszyk (unique na user_id)
            self.repo.rollback()
            existing = self.repo.get_cart_by_user(user_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Utworzono nowy koszyk {created.id} dla uzytkownika {user_id}")
        return created

    #commands
    def add_item(self, user_id: int, product_id: int, quantity=1) -> Dict[str, Any]:
        quantity = coerce_quantity(quantity)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if not product.is_available:
            raise InvalidStateError("Product is not available")

        if product.seller_id == user_id:
            raise ForbiddenError("Cannot add your own product to cart")

        cart = self.get_or_create_cart(user_id)

        try:
            #najpierw atomowy increment, jak nie ma wiersza to insert
            if self.repo.increment_quantity(cart.id, product_id, quantity):
                logger.info(f"Produkt {product_id} juz jest w koszyku {cart.id}, zwiekszam ilosc o {quantity}")
            else:
                logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
                )
            self.repo.commit()
        except IntegrityError:
            #ktos wstawil ta sama pozycje w miedzyczasie (u_cart_product)
            self.repo.rollback()
            self.repo.increment_quantity(cart.id, product_id, quantity)
            self.repo.commit()

        return self._cart_view(cart)

    def update_item_quantity(self, user_id: int, item_id: int, quantity) -> Dict[str, Any]:
        quantity = coerce_quantity(quantity)
        cart = self._existing_cart(user_id)

        if self.repo.set_quantity(cart.id, item_id, quantity) == 0:
            self.repo.rollback()
            raise NotFoundError("Item not found in cart")

        self.repo.commit()
        logger.info(f"Pozycja {item_id} w koszyku {cart.id}: ilosc {quantity}")
        return self._cart_view(cart)

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, Any]:
        cart = self._existing_cart(user_id)

        if self.repo.delete_cart_item(cart.id, item_id) == 0:
            self.repo.rollback()
            raise NotFoundError("Item not found in cart")

        self.repo.commit()
        logger.info(f"Pozycja {item_id} usunieta z koszyka {cart.id}")
        return self._cart_view(cart)

    def clear(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create_cart(user_id)
        self.repo.clear_items(cart.id)
        self.repo.commit()

        logger.info(f"Koszyk {cart.id} wyczyszczony")
        return self._cart_view(cart)

    def _existing_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _resolve_products(self, product_ids: list[int]) -> dict:
        # wzbogacenie o produkt i sprzedawce, blad nie przerywa operacji
        try:
            return self.products.get_products(product_ids)
        except SQLAlchemyError as e:
            logger.warning(f"Nie udalo sie pobrac produktow koszyka: {e}")
            self.repo.rollback()
            return {}

    def _cart_view(self, cart: CartModel) -> Dict[str, Any]:
        cart_id, user_id = cart.id, cart.user_id
        items = [
            (i.id, i.product_id, i.quantity, i.added_at)
            for i in self.repo.get_cart_items(cart_id)
        ]
        products = self._resolve_products([product_id for _, product_id, _, _ in items])

        out_items = []
        total_items = 0
        total_price = Decimal("0.00")

        for item_id, product_id, quantity, added_at in items:
            product = products.get(product_id)
            total_items += quantity

            product_out = None
            if product is not None:
                total_price += product.price * quantity
                product_out = {
                    "id": product.id,
                    "title": product.title,
                    "price": product.price,
                    "images": product.images or [],
                    "is_available": product.is_available,
                    "seller": seller_to_dict(product.seller),
                }

            out_items.append(
                {
                    "id": item_id,
                    "product_id": product_id,
                    "quantity": quantity,
                    "added_at": added_at,
                    "product": product_out,
                }
            )

        #dict przeksztalcany w jsona
        return {
            "cart_id": cart_id,
            "user_id": user_id,
            "items": out_items,
            "total_items": total_items,
            "total_price": total_price,
        }
