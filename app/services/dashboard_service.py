# app/services/dashboard_service.py
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.schemas import DashboardPeriod
from app.domain.status import OrderStatus
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.utils.settings import LOW_STOCK_THRESHOLD


def period_start(period: DashboardPeriod, now: datetime) -> datetime:
    period = DashboardPeriod(period)
    if period == DashboardPeriod.DAILY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == DashboardPeriod.WEEKLY:
        return now - timedelta(days=7)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _seller_items(orders: Iterable[OrderModel], seller_id: int):
    for order in orders:
        for item in order.items:
            if item.product.seller_id == seller_id:
                yield order, item


def _product_sales(orders: List[OrderModel], seller_id: int) -> List[Dict[str, Any]]:
    sales: Dict[int, Dict[str, Any]] = {}
    for _, item in _seller_items(orders, seller_id):
        entry = sales.setdefault(
            item.product_id,
            {"id": item.product_id, "name": item.product.name, "quantity": 0, "revenue": Decimal("0.00")},
        )
        entry["quantity"] += item.quantity
        entry["revenue"] += item.price * item.quantity
    return list(sales.values())


class DashboardService:
    """
    Statystyki sprzedawcy. Liczone tylko z pozycji sprzedawcy
    (zamowienie moze miec produkty kilku sprzedawcow), bez anulowanych.
    """

    def __init__(self, db: Session, low_stock_threshold: int = LOW_STOCK_THRESHOLD):
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.low_stock_threshold = low_stock_threshold

    def seller_dashboard(
        self,
        seller_id: int,
        period: DashboardPeriod = DashboardPeriod.DAILY,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        start = period_start(period, now)

        orders = self.orders.seller_orders_between(
            seller_id, start, now, exclude_status=OrderStatus.CANCELLED.value
        )

        total_revenue = Decimal("0.00")
        trends = defaultdict(lambda: {"revenue": Decimal("0.00"), "orders": set()})
        for order, item in _seller_items(orders, seller_id):
            revenue = item.price * item.quantity
            total_revenue += revenue
            day = trends[order.created_at.date()]
            day["revenue"] += revenue
            day["orders"].add(order.id)

        top_products = sorted(
            _product_sales(orders, seller_id), key=lambda p: p["quantity"], reverse=True
        )[:10]

        low_stock = [
            {"id": p.id, "name": p.name, "sku": p.sku, "stock": p.stock}
            for p in self.products.get_low_stock(seller_id, self.low_stock_threshold)
        ]

        return {
            "period": DashboardPeriod(period).value,
            "summary": {"total_revenue": total_revenue, "order_count": len(orders)},
            "top_products": top_products,
            "low_stock_products": low_stock,
            "status_breakdown": [
                {"status": status, "count": count}
                for status, count in self.orders.status_breakdown(seller_id)
            ],
            "sales_trends": [
                {"day": day, "revenue": data["revenue"], "orders": len(data["orders"])}
                for day, data in sorted(trends.items())
            ],
        }

    def inventory_status(self, seller_id: int) -> Dict[str, Any]:
        products = self.products.get_seller_products(seller_id)

        def status(stock: int) -> str:
            if stock == 0:
                return "out_of_stock"
            if stock < self.low_stock_threshold:
                return "low_stock"
            return "in_stock"

        return {
            "total_products": len(products),
            "out_of_stock": sum(1 for p in products if p.stock == 0),
            "low_stock": sum(
                1 for p in products if 0 < p.stock < self.low_stock_threshold and p.is_available
            ),
            "products": [
                {
                    "id": p.id,
                    "name": p.name,
                    "sku": p.sku,
                    "stock": p.stock,
                    "is_available": p.is_available,
                    "status": status(p.stock),
                }
                for p in products
            ],
        }

    def weekly_summary(
        self, seller_id: int, week_start: datetime, week_end: datetime
    ) -> Optional[Dict[str, Any]]:
        """Podsumowanie tygodnia do maila; None gdy brak sprzedazy."""
        orders = self.orders.seller_orders_between(
            seller_id, week_start, week_end, exclude_status=OrderStatus.CANCELLED.value
        )
        if not orders:
            return None

        sales = _product_sales(orders, seller_id)
        return {
            "total_revenue": sum((p["revenue"] for p in sales), Decimal("0.00")),
            "total_orders": len(orders),
            "total_items_sold": sum(p["quantity"] for p in sales),
            "top_products": sorted(sales, key=lambda p: p["revenue"], reverse=True)[:5],
            "week_start": week_start,
            "week_end": week_end,
        }
