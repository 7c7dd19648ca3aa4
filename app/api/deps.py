# app/api/deps.py
from fastapi import HTTPException

from app.domain.errors import MarketplaceError
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService


def get_notifier() -> NotificationService:
    return NotificationService()


def get_lock_service() -> LockService:
    return LockService()


def http_error(e: Exception) -> HTTPException:
    #bledy domenowe niosa swoj status_code, reszta walidacji to 400
    if isinstance(e, MarketplaceError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    return HTTPException(status_code=400, detail=str(e))
