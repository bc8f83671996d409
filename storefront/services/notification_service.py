# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_placed(user_id: int, order_id: int, order_number: str):
        """
        Wysyła powiadomienie o złożeniu zamówienia (oczekuje na płatność).
        """
        send_order_placed_task.delay(user_id, order_id, order_number)


@celery_app.task(name="storefront.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: int, order_id: int, order_number: str):
    """
    Celery task - na razie tylko loguje, tu podpina sie email/SMS/push.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} ({order_id}) placed, awaiting payment")

    return {"user_id": user_id, "order_id": order_id, "order_number": order_number, "status": "sent"}
