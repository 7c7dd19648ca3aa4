# app/services/order_service.py
import math
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel, OrderItemModel
from app.domain.errors import (
    ConcurrencyConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidTransitionError,
    OrderNotFoundError,
    ProductUnavailableError,
)
from app.domain.status import OrderStatus, can_transition
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.repos.user_repo import UserRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.utils.settings import LOW_STOCK_THRESHOLD
from app.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    #timestamp dla debugowania, losowy sufiks dla unikalnosci (plus unique index w bazie)
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8].upper()}"


@dataclass
class StockChange:
    product_id: int
    product_name: str
    seller_id: int
    before: int
    after: int


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Granica transakcji: zamówienie + pozycje + zmiana stanu magazynu +
    czyszczenie koszyka idą w jednym commicie. Powiadomienia wychodzą
    dopiero po commicie i nie mogą go cofnąć.
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationService,
        lock_service: Optional[LockService] = None,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.notifier = notifier
        self.lock_service = lock_service
        self.low_stock_threshold = low_stock_threshold

    # =====================================================
    # COMMANDS
    # =====================================================
    def place_order(self, user_id: int, shipping_address: str) -> Dict[str, Any]:
        """
        Use Case: zamówienie z koszyka kupującego.

        1. waliduje koszyk (pusty / niedostępny produkt / za mało towaru)
        2. atomowo: order + pozycje + warunkowy decrement stanu + pusty koszyk
        3. po commicie: alerty magazynowe, potwierdzenie dla kupującego,
           jeden mail na sprzedawcę
        """
        token = uuid.uuid4().hex
        if self.lock_service is not None:
            if not self.lock_service.acquire_checkout_lock(user_id, token):
                raise ConcurrencyConflictError("Checkout already in progress for this cart")

        try:
            order, stock_changes = self._place_order(user_id, shipping_address)
        finally:
            if self.lock_service is not None:
                try:
                    self.lock_service.release_checkout_lock(user_id, token)
                except Exception as e:
                    # lock i tak wygasnie po TTL
                    logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

        logger.info(
            f"Order {order.order_number} placed by user {user_id}, total {order.total_amount}"
        )

        self._notify_order_placed(order, stock_changes)

        return self._order_to_dict(order)

    def _validate_items(self, items: List[CartItemModel]):
        # wszystko albo nic, pierwszy blad przerywa cala operacje
        for item in items:
            product = item.product
            if not product.is_available:
                raise ProductUnavailableError(product.id, product.name)
            if product.stock < item.quantity:
                raise InsufficientStockError(product.id, product.name, product.stock)

    def _place_order(self, user_id: int, shipping_address: str):
        cart = self.carts.get_cart_by_user(user_id)
        if not cart or not cart.items:
            raise EmptyCartError()

        items = list(cart.items)
        self._validate_items(items)

        #snapshot cen z momentu walidacji, pozniejsza zmiana ceny nie zmienia zamowienia
        lines = [
            {
                "product_id": i.product_id,
                "product_name": i.product.name,
                "seller_id": i.product.seller_id,
                "quantity": i.quantity,
                "price": i.product.price,
            }
            for i in items
        ]
        total = sum((line["price"] * line["quantity"] for line in lines), Decimal("0.00"))
        cart_id = cart.id

        try:
            order = OrderModel(
                order_number=generate_order_number(),
                user_id=user_id,
                shipping_address=shipping_address,
                status=OrderStatus.PENDING.value,
                total_amount=total,
                items=[
                    OrderItemModel(
                        product_id=line["product_id"],
                        quantity=line["quantity"],
                        price=line["price"],
                    )
                    for line in lines
                ],
            )
            self.repo.add_order(order)

            stock_changes = []
            for line in lines:
                new_stock = self.products.decrement_stock(line["product_id"], line["quantity"])
                if new_stock is None:
                    # inny checkout zdazyl wykupic towar miedzy walidacja a zapisem
                    available = self.products.current_stock(line["product_id"]) or 0
                    logger.warning(
                        f"Stock race lost for product {line['product_id']}: "
                        f"requested {line['quantity']}, available {available}"
                    )
                    raise InsufficientStockError(line["product_id"], line["product_name"], available)

                stock_changes.append(
                    StockChange(
                        product_id=line["product_id"],
                        product_name=line["product_name"],
                        seller_id=line["seller_id"],
                        before=new_stock + line["quantity"],
                        after=new_stock,
                    )
                )

            self.carts.clear_items(cart_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.repo.refresh(order)
        return order, stock_changes

    def cancel_order(self, user_id: int, order_id: int) -> Dict[str, str]:
        """
        Use Case: anulowanie przez kupującego, tylko dla PENDING.
        Przywraca stan magazynu, bez powiadomienia.
        """
        order = self.repo.get_user_order(order_id, user_id)

        if not order:
            raise OrderNotFoundError(order_id)

        if order.status != OrderStatus.PENDING.value:
            raise InvalidTransitionError(order.status, OrderStatus.CANCELLED.value)

        self._cancel_and_restock(order)

        logger.info(f"Order {order.order_number} cancelled by user {user_id}")

        return {"message": "Order cancelled successfully"}

    def update_status(self, seller_id: int, order_id: int, new_status: str) -> Dict[str, Any]:
        """
        Use Case: zmiana statusu przez sprzedawcę.

        Sprzedawca musi mieć w zamówieniu co najmniej jeden swój produkt.
        Anulowanie zwraca na stan wszystkie pozycje (całe zamówienie).
        """
        target = OrderStatus(new_status).value

        order = self.repo.get_seller_order(order_id, seller_id)

        if not order:
            raise OrderNotFoundError(order_id)

        old_status = order.status

        if not can_transition(old_status, target):
            raise InvalidTransitionError(old_status, target)

        if target == OrderStatus.CANCELLED.value:
            self._cancel_and_restock(order)
        else:
            try:
                self._compare_and_set_status(order, target)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        self.repo.refresh(order)

        logger.info(
            f"Order {order.order_number} status {old_status} -> {target} by seller {seller_id}"
        )

        try:
            self.notifier.notify_order_status_changed(
                order.user.email, order.order_number, old_status, target
            )
        except Exception as e:
            logger.error(f"Status notification for order {order.order_number} failed: {e}")

        return self._order_to_dict(order)

    def _compare_and_set_status(self, order: OrderModel, status: str):
        rowcount = self.repo.update_order_status(order.id, order.version, status)
        if rowcount == 0:
            raise ConcurrencyConflictError(
                f"Order {order.id} was modified by another operation"
            )

    def _cancel_and_restock(self, order: OrderModel):
        lines = [(i.product_id, i.quantity) for i in order.items]
        try:
            #najpierw status (CAS na wersji), potem stan - przegrany wyscig nic nie zwraca na stan
            self._compare_and_set_status(order, OrderStatus.CANCELLED.value)
            for product_id, quantity in lines:
                self.products.increment_stock(product_id, quantity)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

    # =====================================================
    # NOTIFICATIONS (po commicie)
    # =====================================================
    def _notify(self, what: str, send, *args):
        # kazde powiadomienie osobno, blad jednego nie blokuje reszty
        try:
            send(*args)
        except Exception as e:
            logger.error(f"{what} notification failed: {e}")

    def _notify_order_placed(self, order: OrderModel, stock_changes: List[StockChange]):
        order_number = order.order_number
        try:
            items = [self._item_to_dict(i) for i in order.items]
            user_ids = {i["seller_id"] for i in items} | {c.seller_id for c in stock_changes}
            emails = self.users.get_emails(user_ids | {order.user_id})
        except Exception as e:
            # bez adresow nie ma do kogo wyslac
            logger.error(f"Notifications for order {order_number} failed: {e}")
            return

        for change in stock_changes:
            seller_email = emails.get(change.seller_id)
            if not seller_email:
                continue
            if change.after == 0:
                self._notify(
                    f"Out-of-stock ({change.product_id})",
                    self.notifier.notify_out_of_stock,
                    seller_email,
                    change.product_name,
                )
            elif change.after < self.low_stock_threshold <= change.before:
                self._notify(
                    f"Low-stock ({change.product_id})",
                    self.notifier.notify_low_stock,
                    seller_email,
                    change.product_name,
                    change.after,
                )

        buyer_email = emails.get(order.user_id)
        if buyer_email:
            self._notify(
                f"Order confirmation ({order_number})",
                self.notifier.notify_order_confirmation,
                buyer_email,
                order_number,
                order.total_amount,
                items,
            )

        by_seller = defaultdict(list)
        for item in items:
            by_seller[item["seller_id"]].append(item)

        for seller_id, seller_items in by_seller.items():
            seller_email = emails.get(seller_id)
            if not seller_email:
                continue
            subtotal = sum((i["price"] * i["quantity"] for i in seller_items), Decimal("0.00"))
            self._notify(
                f"New order for seller {seller_id} ({order_number})",
                self.notifier.notify_new_order_to_seller,
                seller_email,
                order_number,
                seller_items,
                subtotal,
            )

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)

        if not order:
            raise OrderNotFoundError(order_id)

        return self._order_to_dict(order)

    def list_my_orders(
        self,
        user_id: int,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        orders, total = self.repo.list_user_orders(
            user_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            "orders": [self._order_to_dict(o) for o in orders],
            "pagination": self._pagination(page, limit, total),
        }

    def list_seller_orders(
        self,
        seller_id: int,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        orders, total = self.repo.list_seller_orders(
            seller_id, status=status, offset=(page - 1) * limit, limit=limit
        )
        return {
            "orders": [self._order_to_dict(o, seller_id=seller_id) for o in orders],
            "pagination": self._pagination(page, limit, total),
        }

    @staticmethod
    def _pagination(page: int, limit: int, total: int) -> Dict[str, int]:
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }

    @staticmethod
    def _item_to_dict(item: OrderItemModel) -> Dict[str, Any]:
        return {
            "id": item.id,
            "product_id": item.product_id,
            "product_name": item.product.name,
            "seller_id": item.product.seller_id,
            "quantity": item.quantity,
            "price": item.price,
        }

    def _order_to_dict(self, order: OrderModel, seller_id: Optional[int] = None) -> Dict[str, Any]:
        items = [
            self._item_to_dict(i)
            for i in order.items
            if seller_id is None or i.product.seller_id == seller_id
        ]
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "shipping_address": order.shipping_address,
            "total_amount": order.total_amount,
            "status": order.status,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "items": items,
        }
