# app/domain/errors.py
"""
Typowane bledy domenowe.

Serwisy rzucaja podklasy MarketplaceError, routery mapuja je na HTTP
po status_code. Wywolujacy rozrozniaja bledy po typie albo po ``kind``,
nigdy po tresci komunikatu.
"""
from enum import Enum


class ErrorKind(str, Enum):
    EMPTY_CART = "EMPTY_CART"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CART_ITEM_NOT_FOUND = "CART_ITEM_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    PRODUCT_IN_USE = "PRODUCT_IN_USE"


class MarketplaceError(Exception):
    kind: ErrorKind
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyCartError(MarketplaceError):
    kind = ErrorKind.EMPTY_CART
    status_code = 400

    def __init__(self):
        super().__init__("Cart is empty")


class ProductUnavailableError(MarketplaceError):
    kind = ErrorKind.PRODUCT_UNAVAILABLE
    status_code = 409

    def __init__(self, product_id: int, product_name: str):
        super().__init__(f"Product {product_name} is no longer available")
        self.product_id = product_id
        self.product_name = product_name


class InsufficientStockError(MarketplaceError):
    kind = ErrorKind.INSUFFICIENT_STOCK
    status_code = 409

    def __init__(self, product_id: int, product_name: str, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}. Only {available} available"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available


class OrderNotFoundError(MarketplaceError):
    kind = ErrorKind.ORDER_NOT_FOUND
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InvalidTransitionError(MarketplaceError):
    kind = ErrorKind.INVALID_TRANSITION
    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change order status from {current} to {target}")
        self.current = current
        self.target = target


class UnauthorizedError(MarketplaceError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 403


class ProductNotFoundError(MarketplaceError):
    kind = ErrorKind.PRODUCT_NOT_FOUND
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class CartItemNotFoundError(MarketplaceError):
    kind = ErrorKind.CART_ITEM_NOT_FOUND
    status_code = 404

    def __init__(self, item_id: int):
        super().__init__(f"Cart item {item_id} not found")
        self.item_id = item_id


class CommentNotFoundError(MarketplaceError):
    kind = ErrorKind.COMMENT_NOT_FOUND
    status_code = 404

    def __init__(self, comment_id: int):
        super().__init__(f"Comment {comment_id} not found")
        self.comment_id = comment_id


class UserNotFoundError(MarketplaceError):
    kind = ErrorKind.USER_NOT_FOUND
    status_code = 404

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class ConcurrencyConflictError(MarketplaceError):
    kind = ErrorKind.CONCURRENCY_CONFLICT
    status_code = 409


class ProductInUseError(MarketplaceError):
    kind = ErrorKind.PRODUCT_IN_USE
    status_code = 409

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} has order history and cannot be deleted; mark it unavailable instead"
        )
        self.product_id = product_id
