# marketplace/tasks/expire.py
from datetime import datetime

from sqlalchemy.orm import Session

from marketplace.celery_worker import celery_app
from marketplace.data.database import SessionLocal
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.payment_gateway import PaymentGatewayClient
from marketplace.utils.clock import utcnow
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def expire_pending_checkouts(db: Session, now: datetime, service: CheckoutService | None = None) -> int:
    """Wygasza nieoplacone checkouty, zwraca towar i kupony. Zwraca liczbe wygaszonych."""
    service = service or CheckoutService(db, gateway=PaymentGatewayClient(), lock_service=LockService())

    checkout_ids = [c.id for c in OrderRepo(db).get_expired_checkouts(now)]
    logger.info(f"Found {len(checkout_ids)} checkouts to expire")

    expired = 0
    for checkout_id in checkout_ids:
        try:
            service.expire_checkout(checkout_id)
            expired += 1
        except Exception as e:
            # jeden zepsuty checkout nie blokuje reszty
            logger.warning(f"Failed to expire checkout {checkout_id}: {e}")

    return expired


@celery_app.task(name="marketplace.tasks.expire.expire_checkouts_task")
def expire_checkouts_task():
    logger.info("Expire checkouts task started")

    db = SessionLocal()
    try:
        return expire_pending_checkouts(db, utcnow())
    finally:
        db.close()
