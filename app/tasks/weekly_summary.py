# app/tasks/weekly_summary.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.repos.user_repo import UserRepo
from app.services.dashboard_service import DashboardService
from app.services.notification_service import NotificationService
from app.utils.logging import get_logger

logger = get_logger(__name__)


def send_weekly_sales_summaries(
    db,
    notifier: NotificationService,
    target_username: Optional[str] = None,
    now: Optional[datetime] = None,
) -> int:
    """Zwraca liczbe wyslanych podsumowan."""
    week_end = now or datetime.now(timezone.utc)
    week_start = week_end - timedelta(days=7)

    dashboard = DashboardService(db)
    sellers = UserRepo(db).get_sellers(target_username)

    sent = 0
    for seller in sellers:
        summary = dashboard.weekly_summary(seller.id, week_start, week_end)
        if summary is None:
            logger.info(f"No sales for seller {seller.username} in the past week")
            continue

        notifier.notify_weekly_sales_summary(seller.email, seller.username, summary)
        sent += 1
        logger.info(
            f"Weekly sales summary sent to {seller.email} - revenue {summary['total_revenue']}"
        )

    return sent


@celery_app.task(name="app.tasks.weekly_summary.weekly_sales_summary_task")
def weekly_sales_summary_task(target_username: Optional[str] = None):
    logger.info(
        "Weekly sales summary task started"
        + (f" for user {target_username}" if target_username else "")
    )

    db = SessionLocal()
    try:
        sent = send_weekly_sales_summaries(db, NotificationService(), target_username)
    except Exception as e:
        logger.error(f"Error sending weekly sales summary: {e}")
        raise
    finally:
        db.close()

    logger.info(f"Weekly sales summary task completed, {sent} emails queued")
    return {"sent": sent}
