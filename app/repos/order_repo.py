# app/repos/order_repo.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel, OrderItemModel
from app.data.models.product import ProductModel


def _seller_owns_item(seller_id: int):
    #EXISTS: zamowienie zawiera przynajmniej jeden produkt sprzedawcy
    return OrderModel.items.any(
        OrderItemModel.product.has(ProductModel.seller_id == seller_id)
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #flush bez commita - commit robi serwis razem ze stanem magazynu
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_user_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.user_id == user_id)
            .options(selectinload(OrderModel.items))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_seller_order(self, order_id: int, seller_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id, _seller_owns_item(seller_id))
            .options(selectinload(OrderModel.items))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _page(self, conditions, offset: int, limit: int) -> Tuple[List[OrderModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()
        orders = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .options(selectinload(OrderModel.items))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(orders), total

    def list_user_orders(
        self,
        user_id: int,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[OrderModel], int]:
        conditions = [OrderModel.user_id == user_id]
        if status:
            conditions.append(OrderModel.status == status)
        if start_date:
            conditions.append(OrderModel.created_at >= start_date)
        if end_date:
            conditions.append(OrderModel.created_at <= end_date)
        return self._page(conditions, offset, limit)

    def list_seller_orders(
        self,
        seller_id: int,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[OrderModel], int]:
        conditions = [_seller_owns_item(seller_id)]
        if status:
            conditions.append(OrderModel.status == status)
        return self._page(conditions, offset, limit)

    def seller_orders_between(
        self,
        seller_id: int,
        start: datetime,
        end: Optional[datetime] = None,
        exclude_status: Optional[str] = None,
    ) -> List[OrderModel]:
        conditions = [_seller_owns_item(seller_id), OrderModel.created_at >= start]
        if end is not None:
            conditions.append(OrderModel.created_at <= end)
        if exclude_status:
            conditions.append(OrderModel.status != exclude_status)
        return list(
            self.db.execute(
                select(OrderModel)
                .where(*conditions)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.created_at)
            ).scalars().all()
        )

    def status_breakdown(self, seller_id: int) -> List[Tuple[str, int]]:
        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id))
            .where(_seller_owns_item(seller_id))
            .group_by(OrderModel.status)
            .order_by(OrderModel.status)
        ).all()
        return [(status, count) for status, count in rows]

    def update_order_status(self, order_id: int, old_version: int, status: str) -> int:
        # optimistic locking: update ... where id = ? and version = ?
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(
                status=status,
                version=old_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        ).first() is not None

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, order: OrderModel):
        self.db.refresh(order)
