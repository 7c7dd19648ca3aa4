import smtplib
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from app.services.mailer import Mailer
from app.services.notification_service import (
    NotificationService,
    format_money,
    send_email_task,
)

ITEMS = [
    {"product_name": "Laptop", "quantity": 2, "price": Decimal("1000.00")},
    {"product_name": "Mouse", "quantity": 1, "price": Decimal("500.00")},
]


@pytest.fixture
def queued():
    with patch("app.services.notification_service.send_email_task") as task:
        yield task


def _sent(task):
    to, subject, body = task.delay.call_args.args
    return to, subject, body


def test_format_money():
    assert format_money(Decimal("2500")) == "Rp 2,500.00"
    assert format_money("1234567.5") == "Rp 1,234,567.50"


def test_order_confirmation_lists_items_and_total(queued):
    NotificationService().notify_order_confirmation("buyer@example.com", "ORD-1", Decimal("2500.00"), ITEMS)

    to, subject, body = _sent(queued)
    assert to == "buyer@example.com"
    assert subject == "Order Confirmation - ORD-1"
    assert "- Laptop x2 @ Rp 1,000.00" in body
    assert "Total: Rp 2,500.00" in body


def test_seller_email_carries_subtotal(queued):
    NotificationService().notify_new_order_to_seller("seller@example.com", "ORD-1", ITEMS[:1], Decimal("2000.00"))

    _, subject, body = _sent(queued)
    assert subject == "New Order - ORD-1"
    assert "Total: Rp 2,000.00" in body
    assert "Mouse" not in body


def test_stock_alerts(queued):
    svc = NotificationService()

    svc.notify_low_stock("seller@example.com", "Laptop", 3)
    _, subject, body = _sent(queued)
    assert subject == "Low Stock Alert - Laptop"
    assert "Current Stock: 3 units" in body

    svc.notify_out_of_stock("seller@example.com", "Laptop")
    _, subject, body = _sent(queued)
    assert subject == "OUT OF STOCK Alert - Laptop"
    assert "OUT OF STOCK" in body


def test_status_change_message(queued):
    NotificationService().notify_order_status_changed("buyer@example.com", "ORD-1", "PROCESSING", "SHIPPED")

    _, subject, body = _sent(queued)
    assert subject == "Order ORD-1 - Status Update"
    assert "Previous Status: PROCESSING" in body
    assert "New Status: SHIPPED" in body
    assert "Your order has been shipped!" in body


def test_weekly_summary_email(queued):
    summary = {
        "total_revenue": Decimal("3000.00"),
        "total_orders": 2,
        "total_items_sold": 4,
        "top_products": [{"name": "Laptop", "quantity": 3, "revenue": Decimal("3000.00")}],
        "week_start": datetime(2026, 10, 12, 2, 0, tzinfo=timezone.utc),
        "week_end": datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc),
    }

    NotificationService().notify_weekly_sales_summary("seller@example.com", "seller1", summary)

    _, subject, body = _sent(queued)
    assert subject == "Weekly Sales Summary - 2026-10-12"
    assert "Hello seller1!" in body
    assert "Period: 2026-10-12 - 2026-10-19" in body
    assert "1. Laptop: 3 sold, Rp 3,000.00 revenue" in body


def test_enqueue_failure_is_swallowed(queued):
    queued.delay.side_effect = ConnectionError("broker unreachable")

    NotificationService().notify_low_stock("seller@example.com", "Laptop", 3)

    queued.delay.assert_called_once()


# ---------- task + mailer ----------

def test_send_email_task_without_smtp_only_logs():
    with patch("app.services.notification_service.Mailer") as mailer_cls:
        mailer_cls.return_value.send.return_value = False
        result = send_email_task.run("a@example.com", "Hi", "body")

    assert result == {"to": "a@example.com", "subject": "Hi", "status": "logged"}


def test_send_email_task_reports_failure():
    with patch("app.services.notification_service.Mailer") as mailer_cls:
        mailer_cls.return_value.send.side_effect = smtplib.SMTPException("rejected")
        result = send_email_task.run("a@example.com", "Hi", "body")

    assert result["status"] == "failed"


def test_mailer_without_host_does_not_connect():
    with patch("app.services.mailer.smtplib.SMTP") as smtp_cls:
        assert Mailer(host="").send("a@example.com", "Hi", "body") is False

    smtp_cls.assert_not_called()


def test_mailer_sends_with_starttls_and_login():
    mailer = Mailer(host="smtp.example.com", port=587, user="bot", password="secret", sender="shop@example.com")

    with patch("app.services.mailer.smtplib.SMTP") as smtp_cls:
        assert mailer.send("a@example.com", "Hi", "body") is True

    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=10)
    conn = smtp_cls.return_value.__enter__.return_value
    conn.starttls.assert_called_once()
    conn.login.assert_called_once_with("bot", "secret")
    msg = conn.send_message.call_args.args[0]
    assert msg["From"] == "shop@example.com"
    assert msg["To"] == "a@example.com"
    assert msg["Subject"] == "Hi"


def test_mailer_retries_transient_failures():
    mailer = Mailer(host="smtp.example.com", port=587, user="", sender="shop@example.com")

    with patch("app.services.mailer.smtplib.SMTP") as smtp_cls:
        smtp_cls.side_effect = [OSError("connection refused"), smtp_cls.return_value]
        assert mailer.send("a@example.com", "Hi", "body") is True

    assert smtp_cls.call_count == 2
    conn = smtp_cls.return_value.__enter__.return_value
    conn.login.assert_not_called()
    conn.send_message.assert_called_once()
