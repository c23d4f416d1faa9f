# marketplace/tasks/reminders.py
from datetime import datetime, timedelta
from typing import Dict, Any

from sqlalchemy.orm import Session

from marketplace.celery_worker import celery_app
from marketplace.data.database import SessionLocal
from marketplace.domain.states import OrderStatus
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.email_client import EmailClient
from marketplace.utils.clock import as_utc, utcnow
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# wynajem w toku, towar jeszcze u klienta albo do odebrania
ACTIVE_RENTAL_STATUSES = (OrderStatus.CONFIRMED.value, OrderStatus.PICKED_UP.value)


def tomorrow_window(now: datetime):
    tomorrow = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return tomorrow, tomorrow + timedelta(days=1) - timedelta(microseconds=1)


def group_by_customer(items) -> Dict[str, Dict[str, Any]]:
    grouped: Dict[str, Dict[str, Any]] = {}
    for item in items:
        user = item.order.user
        entry = grouped.setdefault(user.email, {"name": user.name, "items": []})
        entry["items"].append(
            {
                "product_name": item.product.name,
                "quantity": item.quantity,
                "rental_end": as_utc(item.rental_end),
                "order_number": item.order.order_number,
            }
        )
    return grouped


def render_reminder(name: str, items) -> str:
    lines = "\n".join(
        f"- {i['product_name']} (Qty: {i['quantity']}) - Order #{i['order_number']} - Due: {i['rental_end']:%d %b %Y}"
        for i in items
    )
    return (
        f"Hello {name},\n\n"
        "This is a friendly reminder that the following rental items are due for return tomorrow:\n\n"
        f"{lines}\n\n"
        "Please return the items on time to avoid late fees. "
        "If you need to extend your rental, contact us before the due date.\n\n"
        "Thank you for choosing our rental service!"
    )


def send_rental_reminders(db: Session, now: datetime, email_client: EmailClient | None = None) -> int:
    """Jeden email na klienta, blad wysylki do jednej osoby nie przerywa reszty."""
    email_client = email_client or EmailClient()
    start, end = tomorrow_window(now)

    items = OrderRepo(db).get_items_due_between(start, end, ACTIVE_RENTAL_STATUSES)
    if not items:
        logger.info("No rental items due for return tomorrow")
        return 0

    grouped = group_by_customer(items)
    logger.info(f"Found {len(items)} rental items due tomorrow for {len(grouped)} customers")

    sent = 0
    for email, data in grouped.items():
        try:
            email_client.send(email, "Rental Return Reminder - Items Due Tomorrow", render_reminder(data["name"], data["items"]))
            sent += 1
        except Exception as e:
            logger.error(f"Failed to send reminder email to {email}: {e}")

    logger.info(f"Rental reminder job completed, sent {sent} emails")
    return sent


@celery_app.task(name="marketplace.tasks.reminders.rental_reminders_task")
def rental_reminders_task():
    logger.info("Rental reminders task started")

    db = SessionLocal()
    try:
        return send_rental_reminders(db, utcnow())
    finally:
        db.close()
