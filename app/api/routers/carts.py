#app/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import http_error
from app.data.database import get_db
from app.domain.errors import MarketplaceError
from app.domain.schemas import (
    AddToCartIn,
    UpdateCartItemIn,
    CartOut,
    MessageOut,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(user_id: int = Query(...), db: Session = Depends(get_db)):
    return CartService(db).get_cart(user_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: AddToCartIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.add_item(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except (MarketplaceError, ValueError) as e:
        raise http_error(e)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: UpdateCartItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.update_item(user_id, item_id, payload.quantity)
    except (MarketplaceError, ValueError) as e:
        raise http_error(e)


@router.delete("/items/{item_id}", response_model=MessageOut)
def remove_item(
    item_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.remove_item(user_id, item_id)
    except MarketplaceError as e:
        raise http_error(e)


@router.delete("", response_model=MessageOut)
def clear_cart(user_id: int = Query(...), db: Session = Depends(get_db)):
    return CartService(db).clear_cart(user_id)
