from datetime import datetime, timedelta, timezone

import pytest

from marketplace.services.cart_service import CartService
from marketplace.tasks.reminders import render_reminder, send_rental_reminders, tomorrow_window

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class RecordingEmail:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, text, html=None):
        if to in self.fail_for:
            raise ConnectionError("smtp down")
        self.sent.append((to, subject, text))


@pytest.fixture
def rent(db, checkout_service, gateway, make_vendor, make_product):
    vendor = make_vendor()
    counter = iter(range(1, 100))

    def _rent(user, ends_at, name="Camera", pay=True):
        product = make_product(vendor, name=name)
        CartService(db).add_item(user.id, product.id, 1, NOW, ends_at)
        summary = checkout_service.start_checkout(user.id)
        if pay:
            payment_id = f"pay_{next(counter)}"
            signature = gateway.pay(summary["gateway_order_id"], payment_id)
            checkout_service.verify_payment(
                user.id, summary["checkout_id"], summary["gateway_order_id"], payment_id, signature
            )
        else:
            checkout_service.cancel_checkout(user.id, summary["checkout_id"])
        return summary

    return _rent


def test_window_covers_whole_next_day():
    start, end = tomorrow_window(NOW)

    assert start == datetime(2026, 10, 20, tzinfo=timezone.utc)
    assert end.date() == start.date()
    assert end.hour == 23


def test_one_email_per_customer_with_all_due_items(db, rent, make_user):
    alice = make_user()
    bob = make_user()
    tomorrow_noon = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)
    rent(alice, tomorrow_noon, name="Camera")
    rent(alice, tomorrow_noon, name="Tripod")
    rent(bob, tomorrow_noon + timedelta(days=3), name="Tent")

    email = RecordingEmail()
    sent = send_rental_reminders(db, NOW, email)

    assert sent == 1
    to, subject, text = email.sent[0]
    assert to == alice.email
    assert "Due Tomorrow" in subject
    assert "Camera" in text and "Tripod" in text
    assert "20 Oct 2026" in text


def test_unpaid_rentals_are_not_reminded(db, rent, make_user):
    rent(make_user(), datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc), pay=False)

    assert send_rental_reminders(db, NOW, RecordingEmail()) == 0


def test_failed_recipient_does_not_stop_others(db, rent, make_user):
    alice = make_user()
    bob = make_user()
    tomorrow_noon = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)
    rent(alice, tomorrow_noon)
    rent(bob, tomorrow_noon, name="Drone")

    email = RecordingEmail(fail_for={alice.email})

    assert send_rental_reminders(db, NOW, email) == 1
    assert email.sent[0][0] == bob.email


def test_reminder_lists_order_and_quantity():
    text = render_reminder(
        "Asha",
        [{"product_name": "Tent", "quantity": 2, "order_number": "ORD-1", "rental_end": NOW}],
    )

    assert text.startswith("Hello Asha,")
    assert "- Tent (Qty: 2) - Order #ORD-1 - Due: 19 Oct 2026" in text
