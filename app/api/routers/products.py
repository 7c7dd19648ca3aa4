# app/api/routers/products.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import get_notifier, http_error
from app.data.database import get_db
from app.domain.errors import MarketplaceError
from app.domain.schemas import (
    CommentCreate,
    CommentOut,
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductUpdate,
    SortBy,
    StockUpdate,
)
from app.services.comment_service import CommentService
from app.services.notification_service import NotificationService
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> ProductService:
    return ProductService(db, notifier=notifier)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    seller_id: int = Query(...),
    svc: ProductService = Depends(get_service),
):
    return svc.create_product(seller_id, payload)


@router.get("", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    is_available: Optional[bool] = None,
    seller_id: Optional[int] = None,
    sort_by: SortBy = SortBy.NEWEST,
    svc: ProductService = Depends(get_service),
):
    return svc.list_products(
        page=page,
        limit=limit,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        is_available=is_available,
        seller_id=seller_id,
        sort_by=sort_by,
    )


@router.get("/categories", response_model=List[str])
def get_categories(svc: ProductService = Depends(get_service)):
    return svc.categories()


@router.get("/low-stock", response_model=List[ProductOut])
def get_low_stock(
    seller_id: int = Query(...),
    threshold: Optional[int] = Query(None, ge=1),
    svc: ProductService = Depends(get_service),
):
    return svc.low_stock_products(seller_id, threshold)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: ProductService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except MarketplaceError as e:
        raise http_error(e)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    seller_id: int = Query(...),
    svc: ProductService = Depends(get_service),
):
    try:
        return svc.update_product(product_id, seller_id, payload)
    except MarketplaceError as e:
        raise http_error(e)


@router.patch("/{product_id}/stock", response_model=ProductOut)
def update_stock(
    product_id: int,
    payload: StockUpdate,
    seller_id: int = Query(...),
    svc: ProductService = Depends(get_service),
):
    try:
        return svc.update_stock(product_id, seller_id, payload.stock)
    except MarketplaceError as e:
        raise http_error(e)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    seller_id: int = Query(...),
    svc: ProductService = Depends(get_service),
):
    try:
        svc.delete_product(product_id, seller_id)
    except MarketplaceError as e:
        raise http_error(e)
    return Response(status_code=204)


# ---------- komentarze do produktu ----------

@router.get("/{product_id}/comments", response_model=List[CommentOut])
def list_comments(product_id: int, db: Session = Depends(get_db)):
    return CommentService(db).list_for_product(product_id)


@router.post("/{product_id}/comments", response_model=CommentOut, status_code=201)
def create_comment(
    product_id: int,
    payload: CommentCreate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return CommentService(db).create(product_id, user_id, payload.text)
    except MarketplaceError as e:
        raise http_error(e)
