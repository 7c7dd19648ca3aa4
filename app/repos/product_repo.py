# app/repos/product_repo.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func, or_, case, true, false
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.order import OrderItemModel
from app.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        try:
            self.db.commit()
        except IntegrityError:
            # sesja musi wrocic do stanu uzywalnego przed propagacja bledu
            self.db.rollback()
            raise
        self.db.refresh(product)
        return product

    def delete_product(self, product: ProductModel):
        self.db.delete(product)
        self.db.commit()

    def search(
        self,
        *,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price=None,
        max_price=None,
        is_available: Optional[bool] = None,
        seller_id: Optional[int] = None,
        order_by=None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[ProductModel], int]:
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        if category:
            conditions.append(ProductModel.category == category)
        if min_price is not None:
            conditions.append(ProductModel.price >= min_price)
        if max_price is not None:
            conditions.append(ProductModel.price <= max_price)
        if is_available is not None:
            conditions.append(ProductModel.is_available == is_available)
        if seller_id is not None:
            conditions.append(ProductModel.seller_id == seller_id)

        stmt = select(ProductModel).where(*conditions)
        if order_by is not None:
            stmt = stmt.order_by(*order_by)

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*conditions)
        ).scalar_one()
        products = self.db.execute(stmt.offset(offset).limit(limit)).scalars().all()
        return list(products), total

    def get_seller_products(self, seller_id: int) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.seller_id == seller_id)
                .order_by(ProductModel.id)
            ).scalars().all()
        )

    def get_low_stock(self, seller_id: int, threshold: int) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(
                    ProductModel.seller_id == seller_id,
                    ProductModel.stock < threshold,
                    ProductModel.is_available.is_(True),
                )
                .order_by(ProductModel.stock.asc())
            ).scalars().all()
        )

    def get_categories(self) -> List[str]:
        return list(
            self.db.execute(
                select(ProductModel.category).distinct().order_by(ProductModel.category)
            ).scalars().all()
        )

    def current_stock(self, product_id: int) -> int | None:
        #swiezy odczyt z bazy, z pominieciem identity map
        return self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def has_order_history(self, product_id: int) -> bool:
        return self.db.execute(
            select(OrderItemModel.id).where(OrderItemModel.product_id == product_id).limit(1)
        ).first() is not None

    # ----- warunkowe zmiany stanu magazynu (bez commita, commit robi serwis) -----

    def decrement_stock(self, product_id: int, quantity: int) -> int | None:
        """
        UPDATE ... SET stock = stock - q WHERE id = ? AND stock >= q RETURNING stock

        Zwraca nowy stan albo None gdy warunek nie przeszedl
        (ktos inny zdazyl wykupic towar).
        """
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(
                stock=ProductModel.stock - quantity,
                is_available=case(
                    (ProductModel.stock - quantity <= 0, false()),
                    else_=ProductModel.is_available,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .returning(ProductModel.stock)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def increment_stock(self, product_id: int, quantity: int) -> int | None:
        #produkt wylaczony automatycznie przy stock == 0 wraca do sprzedazy
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                stock=ProductModel.stock + quantity,
                is_available=case(
                    (ProductModel.stock == 0, true()),
                    else_=ProductModel.is_available,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .returning(ProductModel.stock)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
