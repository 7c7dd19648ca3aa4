# app/api/routers/orders.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_lock_service, get_notifier, http_error
from app.data.database import get_db
from app.domain.errors import MarketplaceError
from app.domain.schemas import (
    MessageOut,
    OrderCreate,
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
)
from app.domain.status import OrderStatus
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    lock_service: LockService = Depends(get_lock_service),
) -> OrderService:
    return OrderService(db, notifier=notifier, lock_service=lock_service)


# ---------- kupujacy ----------

@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    """
    Tworzy zamówienie z koszyka kupującego.
    Powiadomienia wysyłane asynchronicznie, po commicie.
    """
    try:
        return svc.place_order(user_id, payload.shipping_address)
    except MarketplaceError as e:
        raise http_error(e)


@router.get("/my-orders", response_model=OrderPage)
def get_my_orders(
    user_id: int = Query(...),
    status: Optional[OrderStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    svc: OrderService = Depends(get_service),
):
    return svc.list_my_orders(
        user_id,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/my-orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_order(user_id, order_id)
    except MarketplaceError as e:
        raise http_error(e)


@router.delete("/my-orders/{order_id}", response_model=MessageOut)
def cancel_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.cancel_order(user_id, order_id)
    except MarketplaceError as e:
        raise http_error(e)


# ---------- sprzedawca ----------

@router.get("/seller", response_model=OrderPage)
def get_seller_orders(
    seller_id: int = Query(...),
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    svc: OrderService = Depends(get_service),
):
    return svc.list_seller_orders(
        seller_id, status=status.value if status else None, page=page, limit=limit
    )


@router.patch("/seller/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    seller_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.update_status(seller_id, order_id, payload.status.value)
    except MarketplaceError as e:
        raise http_error(e)
