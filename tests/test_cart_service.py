from decimal import Decimal

import pytest

from app.data.models import ProductModel
from app.domain.errors import (
    CartItemNotFoundError,
    InsufficientStockError,
    ProductNotFoundError,
    ProductUnavailableError,
    UnauthorizedError,
)
from app.services.cart_service import CartService


@pytest.fixture
def shop(make_user, make_product):
    seller = make_user("SELLER")
    buyer = make_user("CUSTOMER")
    laptop = make_product(seller, name="Laptop", price="1500.00", stock=3)
    mouse = make_product(seller, name="Mouse", price="25.50", stock=100)
    return seller, buyer, laptop, mouse


def test_get_cart_creates_empty_cart(db, make_user):
    buyer = make_user("CUSTOMER")
    svc = CartService(db)

    cart = svc.get_cart(buyer.id)

    assert cart["user_id"] == buyer.id
    assert cart["items"] == []
    assert cart["total"] == Decimal("0.00")
    # drugi odczyt nie zaklada drugiego koszyka
    assert svc.get_cart(buyer.id)["cart_id"] == cart["cart_id"]


def test_add_item_and_total(db, shop):
    _, buyer, laptop, mouse = shop
    svc = CartService(db)

    svc.add_item(buyer.id, laptop.id, 1)
    cart = svc.add_item(buyer.id, mouse.id, 2)

    assert [i["product_name"] for i in cart["items"]] == ["Laptop", "Mouse"]
    assert cart["items"][1]["subtotal"] == Decimal("51.00")
    assert cart["total"] == Decimal("1551.00")


def test_adding_same_product_increments_quantity(db, shop):
    _, buyer, laptop, _ = shop
    svc = CartService(db)

    svc.add_item(buyer.id, laptop.id, 1)
    cart = svc.add_item(buyer.id, laptop.id, 2)

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3


def test_add_item_respects_stock_including_existing_quantity(db, shop):
    _, buyer, laptop, _ = shop
    svc = CartService(db)
    svc.add_item(buyer.id, laptop.id, 2)

    with pytest.raises(InsufficientStockError) as exc:
        svc.add_item(buyer.id, laptop.id, 2)

    assert exc.value.available == 3
    assert svc.get_cart(buyer.id)["items"][0]["quantity"] == 2


def test_add_item_validation(db, shop, make_product):
    seller, buyer, laptop, _ = shop
    hidden = make_product(seller, name="Hidden", is_available=False)
    svc = CartService(db)

    with pytest.raises(ValueError):
        svc.add_item(buyer.id, laptop.id, 0)
    with pytest.raises(ProductNotFoundError):
        svc.add_item(buyer.id, 9999, 1)
    with pytest.raises(ProductUnavailableError):
        svc.add_item(buyer.id, hidden.id, 1)


def test_cart_total_uses_current_price(db, shop):
    _, buyer, laptop, _ = shop
    svc = CartService(db)
    svc.add_item(buyer.id, laptop.id, 2)

    product = db.get(ProductModel, laptop.id)
    product.price = Decimal("1400.00")
    db.commit()

    assert svc.get_cart(buyer.id)["total"] == Decimal("2800.00")


def test_update_item(db, shop):
    _, buyer, laptop, _ = shop
    svc = CartService(db)
    item_id = svc.add_item(buyer.id, laptop.id, 1)["items"][0]["id"]

    cart = svc.update_item(buyer.id, item_id, 3)
    assert cart["items"][0]["quantity"] == 3

    with pytest.raises(InsufficientStockError):
        svc.update_item(buyer.id, item_id, 4)
    with pytest.raises(CartItemNotFoundError):
        svc.update_item(buyer.id, 9999, 1)


def test_other_users_item_is_off_limits(db, shop, make_user):
    _, buyer, laptop, _ = shop
    intruder = make_user("CUSTOMER")
    svc = CartService(db)
    item_id = svc.add_item(buyer.id, laptop.id, 1)["items"][0]["id"]

    with pytest.raises(UnauthorizedError):
        svc.update_item(intruder.id, item_id, 2)
    with pytest.raises(UnauthorizedError):
        svc.remove_item(intruder.id, item_id)


def test_remove_and_clear(db, shop):
    _, buyer, laptop, mouse = shop
    svc = CartService(db)
    svc.add_item(buyer.id, laptop.id, 1)
    item_id = svc.add_item(buyer.id, mouse.id, 1)["items"][1]["id"]

    assert svc.remove_item(buyer.id, item_id) == {"message": "Item removed from cart"}
    assert [i["product_id"] for i in svc.get_cart(buyer.id)["items"]] == [laptop.id]

    assert svc.clear_cart(buyer.id) == {"message": "Cart cleared"}
    assert svc.get_cart(buyer.id)["items"] == []
