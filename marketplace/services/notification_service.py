# marketplace/services/notification_service.py
from typing import List

from marketplace.celery_worker import celery_app
from marketplace.services.email_client import EmailClient
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania, best-effort:
    blad kolejki nigdy nie cofa zamowienia.
    """

    @staticmethod
    def send_order_confirmation(email: str, name: str, order_numbers: List[str]) -> bool:
        try:
            send_order_confirmation_task.delay(email, name, order_numbers)
            return True
        except Exception as e:
            logger.warning(f"Could not queue order confirmation for {email}: {e}")
            return False


@celery_app.task(name="marketplace.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(email: str, name: str, order_numbers: List[str]):
    numbers = ", ".join(order_numbers)
    text = (
        f"Hello {name},\n\n"
        f"Your payment was received and the following orders are confirmed: {numbers}.\n\n"
        "Thank you for renting with us!"
    )
    EmailClient().send(email, "Your rental order is confirmed", text)

    logger.info(f"[NOTIFICATION] {email}: orders {numbers} confirmed")
    return {"email": email, "orders": order_numbers, "status": "sent"}
