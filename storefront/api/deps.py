# storefront/api/deps.py
from functools import lru_cache

from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils import settings


@lru_cache
def get_lock_service() -> LockService | None:
    # bez locka redis nie jest potrzebny do checkoutu
    if not settings.CHECKOUT_LOCK_ENABLED:
        return None
    # jeden klient redis (pula polaczen) na proces
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()
