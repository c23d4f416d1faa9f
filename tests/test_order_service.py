import pytest

from marketplace.data.models import VendorModel
from marketplace.domain.errors import Conflict, Forbidden, NotFound
from marketplace.domain.states import OrderStatus, transition_order
from marketplace.services.order_service import OrderService


@pytest.fixture
def paid_order(db, checkout_service, gateway, make_user, make_vendor, make_product, add_to_cart):
    user = make_user()
    vendor = make_vendor()
    product = make_product(vendor, qty=4)
    add_to_cart(user, product, quantity=3)

    summary = checkout_service.start_checkout(user.id)
    signature = gateway.pay(summary["gateway_order_id"], "pay_1")
    checkout_service.verify_payment(user.id, summary["checkout_id"], summary["gateway_order_id"], "pay_1", signature)

    return user, vendor, product, summary["order_ids"][0]


def vendor_user_id(db, vendor):
    return db.get(VendorModel, vendor.id).user_id


def test_order_moves_through_rental_lifecycle_and_returns_stock(db, paid_order, stock):
    user, vendor, product, order_id = paid_order
    service = OrderService(db)
    assert stock(product.id) == 1

    picked = service.update_order_status(vendor_user_id(db, vendor), order_id, "PICKED_UP")
    assert picked.status == "PICKED_UP"
    assert stock(product.id) == 1

    returned = service.update_order_status(vendor_user_id(db, vendor), order_id, "RETURNED")
    assert returned.status == "RETURNED"
    assert stock(product.id) == 4
    assert all(r.status == "RELEASED" for i in returned.items for r in i.reservations)


def test_returned_order_cannot_be_reopened(db, paid_order):
    _, vendor, _, order_id = paid_order
    service = OrderService(db)
    service.update_order_status(vendor_user_id(db, vendor), order_id, "PICKED_UP")
    service.update_order_status(vendor_user_id(db, vendor), order_id, "RETURNED")

    with pytest.raises(Conflict):
        service.update_order_status(vendor_user_id(db, vendor), order_id, "PICKED_UP")


def test_picked_up_order_cannot_be_cancelled(db, paid_order):
    _, vendor, _, order_id = paid_order
    service = OrderService(db)
    service.update_order_status(vendor_user_id(db, vendor), order_id, "PICKED_UP")

    with pytest.raises(Conflict):
        service.update_order_status(vendor_user_id(db, vendor), order_id, "CANCELLED")


def test_cancelling_confirmed_order_releases_stock(db, paid_order, stock):
    _, vendor, product, order_id = paid_order

    order = OrderService(db).update_order_status(vendor_user_id(db, vendor), order_id, "CANCELLED")

    assert order.status == "CANCELLED"
    # faktura oplacona zostaje, zwrot pieniedzy poza systemem
    assert order.invoice.status == "PAID"
    assert stock(product.id) == 4


def test_other_vendor_cannot_touch_order(db, paid_order, make_vendor):
    _, _, _, order_id = paid_order
    stranger = make_vendor("Other Rentals")

    with pytest.raises(Forbidden):
        OrderService(db).update_order_status(vendor_user_id(db, stranger), order_id, "PICKED_UP")


def test_customer_without_vendor_profile_is_forbidden(db, paid_order):
    user, _, _, order_id = paid_order

    with pytest.raises(Forbidden):
        OrderService(db).update_order_status(user.id, order_id, "PICKED_UP")


def test_customer_sees_only_own_orders(db, paid_order, make_user):
    user, _, _, order_id = paid_order
    service = OrderService(db)

    assert [o.id for o in service.list_user_orders(user.id)] == [order_id]
    assert service.list_user_orders(make_user().id) == []

    with pytest.raises(NotFound):
        service.get_order(make_user().id, order_id)


def test_vendor_order_listing_filters_by_status(db, paid_order):
    _, vendor, _, order_id = paid_order
    service = OrderService(db)

    assert [o.id for o in service.list_vendor_orders(vendor_user_id(db, vendor), "CONFIRMED")] == [order_id]
    assert service.list_vendor_orders(vendor_user_id(db, vendor), "RETURNED") == []


def test_transition_table_rejects_skipping_states():
    class Order:
        status = OrderStatus.PENDING_PAYMENT.value

    with pytest.raises(Conflict):
        transition_order(Order(), OrderStatus.RETURNED)


def test_vendor_cannot_change_order_awaiting_payment(db, checkout_service, gateway, make_user, make_vendor, make_product, add_to_cart, stock):
    user = make_user()
    vendor = make_vendor()
    product = make_product(vendor, qty=4)
    add_to_cart(user, product, quantity=2)
    summary = checkout_service.start_checkout(user.id)
    order_id = summary["order_ids"][0]

    with pytest.raises(Conflict):
        OrderService(db).update_order_status(vendor_user_id(db, vendor), order_id, "CANCELLED")

    assert stock(product.id) == 2

    # platnosc klienta nadal przechodzi
    signature = gateway.pay(summary["gateway_order_id"], "pay_1")
    result = checkout_service.verify_payment(user.id, summary["checkout_id"], summary["gateway_order_id"], "pay_1", signature)

    assert result["status"] == "PAID"
    order = OrderService(db).get_order(user.id, order_id)
    assert order.status == "CONFIRMED"
    assert order.invoice.status == "PAID"


def test_vendor_lists_own_invoices(db, paid_order, make_vendor):
    _, vendor, _, order_id = paid_order
    service = OrderService(db)

    invoices = service.list_vendor_invoices(vendor_user_id(db, vendor))
    assert [i.order_id for i in invoices] == [order_id]
    assert invoices[0].status == "PAID"
    assert len(invoices[0].payments) == 1

    assert service.list_vendor_invoices(vendor_user_id(db, vendor), "DRAFT") == []
    assert service.list_vendor_invoices(vendor_user_id(db, make_vendor("Other Rentals"))) == []
