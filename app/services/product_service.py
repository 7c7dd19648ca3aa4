# app/services/product_service.py
import math
import random
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import ProductInUseError, ProductNotFoundError, UnauthorizedError
from app.domain.schemas import ProductCreate, ProductUpdate, SortBy
from app.repos.product_repo import ProductRepo
from app.repos.user_repo import UserRepo
from app.services.notification_service import NotificationService
from app.utils.settings import LOW_STOCK_THRESHOLD
from app.utils.logging import get_logger

logger = get_logger(__name__)

_ORDERING = {
    SortBy.PRICE_ASC: (ProductModel.price.asc(), ProductModel.id.asc()),
    SortBy.PRICE_DESC: (ProductModel.price.desc(), ProductModel.id.asc()),
    SortBy.POPULARITY: (ProductModel.popularity.desc(), ProductModel.id.asc()),
    SortBy.NEWEST: (ProductModel.created_at.desc(), ProductModel.id.desc()),
}


def generate_sku(category: str, name: str) -> str:
    # ELE-LAP-123456-042
    category_code = category[:3].upper()
    name_code = name[:3].upper().replace(" ", "")
    timestamp = str(int(time.time() * 1000))[-6:]
    suffix = f"{random.randint(0, 999):03d}"
    return f"{category_code}-{name_code}-{timestamp}-{suffix}"


class ProductService:
    """Katalog produktow: CRUD sprzedawcy + wyszukiwanie dla kupujacych."""

    def __init__(
        self,
        db: Session,
        notifier: NotificationService,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    ):
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)
        self.notifier = notifier
        self.low_stock_threshold = low_stock_threshold

    def create_product(self, seller_id: int, payload: ProductCreate) -> ProductModel:
        data = payload.model_dump()
        if data["is_available"] is None:
            data["is_available"] = data["stock"] > 0
        if data["stock"] == 0:
            data["is_available"] = False

        product = ProductModel(
            **data,
            sku=generate_sku(payload.category, payload.name),
            seller_id=seller_id,
        )
        created = self.repo.create_product(product)

        logger.info(f"Seller {seller_id} created product {created.id} ({created.sku})")
        return created

    def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price=None,
        max_price=None,
        is_available: Optional[bool] = None,
        seller_id: Optional[int] = None,
        sort_by: SortBy = SortBy.NEWEST,
    ) -> Dict[str, Any]:
        products, total = self.repo.search(
            search=search,
            category=category,
            min_price=min_price,
            max_price=max_price,
            is_available=is_available,
            seller_id=seller_id,
            order_by=_ORDERING[SortBy(sort_by)],
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            "data": products,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return product

    def _owned(self, product_id: int, seller_id: int) -> ProductModel:
        product = self.get_product(product_id)
        if product.seller_id != seller_id:
            raise UnauthorizedError("Unauthorized to modify this product")
        return product

    def update_product(self, product_id: int, seller_id: int, payload: ProductUpdate) -> ProductModel:
        product = self._owned(product_id, seller_id)

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        if product.stock == 0:
            product.is_available = False

        return self.repo.save(product)

    def delete_product(self, product_id: int, seller_id: int):
        product = self._owned(product_id, seller_id)

        # pozycje zamowien trzymaja FK do produktu, historia musi zostac
        if self.repo.has_order_history(product_id):
            raise ProductInUseError(product_id)

        self.repo.delete_product(product)
        logger.info(f"Seller {seller_id} deleted product {product_id}")

    def update_stock(self, product_id: int, seller_id: int, stock: int) -> ProductModel:
        """
        Reczna zmiana stanu przez sprzedawce.
        is_available idzie za stanem; alert tylko przy przekroczeniu progu.
        """
        product = self._owned(product_id, seller_id)
        old_stock = product.stock

        product.stock = stock
        product.is_available = stock > 0
        product = self.repo.save(product)

        logger.info(f"Product {product_id} stock {old_stock} -> {stock}")

        try:
            seller = self.users.get_user(seller_id)
            if seller:
                if 0 < stock < self.low_stock_threshold <= old_stock:
                    self.notifier.notify_low_stock(seller.email, product.name, stock)
                if stock == 0 and old_stock > 0:
                    self.notifier.notify_out_of_stock(seller.email, product.name)
        except Exception as e:
            logger.error(f"Stock alert for product {product_id} failed: {e}")

        return product

    def low_stock_products(self, seller_id: int, threshold: Optional[int] = None) -> List[ProductModel]:
        return self.repo.get_low_stock(seller_id, threshold or self.low_stock_threshold)

    def categories(self) -> List[str]:
        return self.repo.get_categories()
