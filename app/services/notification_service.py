# app/services/notification_service.py
from decimal import Decimal
from typing import Iterable, Mapping

from app.celery_worker import celery_app
from app.services.mailer import Mailer
from app.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_MESSAGES = {
    "PENDING": "Your order is pending confirmation.",
    "PROCESSING": "Your order is being processed.",
    "SHIPPED": "Your order has been shipped!",
    "DELIVERED": "Your order has been delivered.",
    "CANCELLED": "Your order has been cancelled.",
}


def format_money(amount) -> str:
    return f"Rp {Decimal(amount):,.2f}"


def _items_list(items: Iterable[Mapping]) -> str:
    return "\n".join(
        f"- {i['product_name']} x{i['quantity']} @ {format_money(i['price'])}"
        for i in items
    )


class NotificationService:
    """
    Serwis do wysyłania powiadomień e-mail.

    Fire-and-forget: każda metoda renderuje treść i wrzuca task do Celery.
    Błąd kolejkowania jest logowany i nigdy nie wychodzi do wywołującego,
    bo zamówienie jest już zatwierdzone.
    """

    def _dispatch(self, to: str, subject: str, body: str):
        try:
            send_email_task.delay(to, subject, body)
        except Exception as e:
            logger.error(f"Failed to enqueue email to {to} ({subject}): {e}")

    def notify_order_confirmation(self, email: str, order_number: str, total_amount, items):
        body = (
            "Hello!\n\n"
            f"Your order {order_number} has been confirmed.\n\n"
            "Order Details:\n"
            f"{_items_list(items)}\n\n"
            f"Total: {format_money(total_amount)}\n\n"
            "Thank you for your purchase!\n"
        )
        self._dispatch(email, f"Order Confirmation - {order_number}", body)

    def notify_new_order_to_seller(self, email: str, order_number: str, items, subtotal):
        body = (
            "Hello!\n\n"
            f"You have received a new order: {order_number}\n\n"
            "Items:\n"
            f"{_items_list(items)}\n\n"
            f"Total: {format_money(subtotal)}\n\n"
            "Please process this order from your seller dashboard.\n"
        )
        self._dispatch(email, f"New Order - {order_number}", body)

    def notify_low_stock(self, email: str, product_name: str, stock: int):
        body = (
            "Hello!\n\n"
            f'ALERT: Your product "{product_name}" is running low on stock.\n\n'
            f"Current Stock: {stock} units\n\n"
            "Please restock this product to avoid running out of inventory.\n"
        )
        self._dispatch(email, f"Low Stock Alert - {product_name}", body)

    def notify_out_of_stock(self, email: str, product_name: str):
        body = (
            "Hello!\n\n"
            f'URGENT: Your product "{product_name}" is now OUT OF STOCK!\n\n'
            "This product is no longer available for purchase.\n"
            "Please restock immediately to resume sales.\n"
        )
        self._dispatch(email, f"OUT OF STOCK Alert - {product_name}", body)

    def notify_order_status_changed(self, email: str, order_number: str, old_status: str, new_status: str):
        body = (
            "Hello!\n\n"
            f"Your order {order_number} status has been updated.\n\n"
            f"Previous Status: {old_status}\n"
            f"New Status: {new_status}\n\n"
            f"{STATUS_MESSAGES.get(new_status, '')}\n\n"
            "Thank you for shopping with us!\n"
        )
        self._dispatch(email, f"Order {order_number} - Status Update", body)

    def notify_weekly_sales_summary(self, email: str, username: str, summary: Mapping):
        top = "\n".join(
            f"{n}. {p['name']}: {p['quantity']} sold, {format_money(p['revenue'])} revenue"
            for n, p in enumerate(summary["top_products"], start=1)
        )
        week_start = summary["week_start"].date().isoformat()
        week_end = summary["week_end"].date().isoformat()
        body = (
            f"Hello {username}!\n\n"
            "Here's your weekly sales summary:\n\n"
            f"Period: {week_start} - {week_end}\n\n"
            "Sales Overview:\n"
            f"- Total Revenue: {format_money(summary['total_revenue'])}\n"
            f"- Total Orders: {summary['total_orders']}\n"
            f"- Total Items Sold: {summary['total_items_sold']}\n\n"
            "Top Selling Products:\n"
            f"{top or 'No sales this week'}\n"
        )
        self._dispatch(email, f"Weekly Sales Summary - {week_start}", body)


@celery_app.task(name="app.services.notification_service.send_email_task")
def send_email_task(to: str, subject: str, body: str):
    """
    Celery task - faktyczna wysyłka przez SMTP (z retry w Mailerze).
    Nieudana wysyłka jest tylko logowana.
    """
    try:
        sent = Mailer().send(to, subject, body)
    except Exception as e:
        logger.error(f"Failed to send email to {to} ({subject}): {e}")
        return {"to": to, "subject": subject, "status": "failed"}

    return {"to": to, "subject": subject, "status": "sent" if sent else "logged"}
