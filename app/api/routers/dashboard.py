# app/api/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import http_error
from app.data.database import get_db
from app.domain.errors import MarketplaceError, UserNotFoundError
from app.domain.schemas import DashboardOut, DashboardPeriod, InventoryOut, MessageOut
from app.repos.user_repo import UserRepo
from app.services.dashboard_service import DashboardService
from app.tasks.weekly_summary import weekly_sales_summary_task

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/seller", response_model=DashboardOut)
def get_seller_dashboard(
    seller_id: int = Query(...),
    period: DashboardPeriod = DashboardPeriod.DAILY,
    db: Session = Depends(get_db),
):
    return DashboardService(db).seller_dashboard(seller_id, period)


@router.get("/dashboard/inventory", response_model=InventoryOut)
def get_inventory_status(seller_id: int = Query(...), db: Session = Depends(get_db)):
    return DashboardService(db).inventory_status(seller_id)


@router.post("/email/trigger-weekly-summary", response_model=MessageOut, status_code=202)
def trigger_weekly_summary(user_id: int = Query(...), db: Session = Depends(get_db)):
    """Ręczne odpalenie podsumowania tygodnia dla jednego sprzedawcy."""
    try:
        user = UserRepo(db).get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)
    except MarketplaceError as e:
        raise http_error(e)

    weekly_sales_summary_task.delay(user.username)
    return {"message": "Weekly sales summary emails are being sent..."}
