from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import (
    CartItemNotFoundError,
    ConcurrencyConflictError,
    InsufficientStockError,
    ProductNotFoundError,
    ProductUnavailableError,
    UnauthorizedError,
)
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt

    Jeden koszyk na kupujacego, tworzony przy pierwszym uzyciu.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def _get_or_create(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        logger.info(f"Tworze nowy koszyk dla uzytkownika {user_id}")
        return self.repo.create_cart(user_id)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create(user_id)

        #pobierz produkty z repo i oblicz total po aktualnej cenie
        items = self.repo.get_cart_items(cart.id)
        lines = [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product.name,
                "price": i.product.price,
                "quantity": i.quantity,
                "subtotal": i.product.price * i.quantity,
            }
            for i in items
        ]
        total = sum((line["subtotal"] for line in lines), Decimal("0.00"))

        #dict przyksztalcany w jsona
        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": lines,
            "total": total,
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        # Walidacje
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        cart = self._get_or_create(user_id)

        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)

        if not product.is_available:
            raise ProductUnavailableError(product.id, product.name)

        existing_item = self.repo.get_cart_item(cart.id, product_id)
        wanted = quantity + (existing_item.quantity if existing_item else 0)

        if product.stock < wanted:
            raise InsufficientStockError(product.id, product.name, product.stock)

        if existing_item:
            # ten sam produkt drugi raz = wieksza ilosc, nie nowy wiersz
            logger.info(
                f"Produkt {product_id} już jest w koszyku, zwiekszam ilosc "
                f"z {existing_item.quantity} do {wanted}"
            )
            existing_item.quantity = wanted
            self.repo.add_cart_item(existing_item)
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        try:
            self.repo.commit()
        except IntegrityError:
            # unique (cart_id, product_id) - rownolegle dodanie tego samego produktu
            self.repo.rollback()
            raise ConcurrencyConflictError(
                "Cart was modified by another operation, please retry"
            )

        return self.get_cart(user_id)

    def _owned_item(self, user_id: int, item_id: int) -> CartItemModel:
        item = self.repo.get_item(item_id)

        if not item:
            raise CartItemNotFoundError(item_id)

        if item.cart.user_id != user_id:
            raise UnauthorizedError("Cart item belongs to another user")

        return item

    def update_item(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        item = self._owned_item(user_id, item_id)

        if item.product.stock < quantity:
            raise InsufficientStockError(item.product.id, item.product.name, item.product.stock)

        item.quantity = quantity
        self.repo.add_cart_item(item)
        self.repo.commit()

        return self.get_cart(user_id)

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, str]:
        item = self._owned_item(user_id, item_id)

        logger.info(f"Usuwanie pozycji {item_id} z koszyka {item.cart_id}")

        self.repo.delete_item(item)
        self.repo.commit()

        return {"message": "Item removed from cart"}

    def clear_cart(self, user_id: int) -> Dict[str, str]:
        cart = self._get_or_create(user_id)

        removed = self.repo.clear_items(cart.id)
        self.repo.commit()

        logger.info(f"Koszyk {cart.id} wyczyszczony, usunieto {removed} pozycji")

        return {"message": "Cart cleared"}
