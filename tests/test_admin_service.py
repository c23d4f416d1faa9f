from decimal import Decimal

import pytest

from marketplace.domain.errors import Forbidden
from marketplace.domain.schemas import AdminUserCreate
from marketplace.services.admin_service import AdminService


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin", role="ADMIN")


@pytest.fixture
def placed_orders(checkout_service, gateway, make_user, make_vendor, make_product, add_to_cart):
    """Jedno oplacone zamowienie i jedno czekajace na platnosc."""
    vendor = make_vendor()
    product = make_product(vendor, price="100.00", qty=5)

    paid_by = make_user()
    add_to_cart(paid_by, product, quantity=1)
    paid = checkout_service.start_checkout(paid_by.id)
    signature = gateway.pay(paid["gateway_order_id"], "pay_1")
    checkout_service.verify_payment(paid_by.id, paid["checkout_id"], paid["gateway_order_id"], "pay_1", signature)

    pending_by = make_user()
    add_to_cart(pending_by, product, quantity=1)
    pending = checkout_service.start_checkout(pending_by.id)

    return paid["order_ids"][0], pending["order_ids"][0]


def test_only_admin_gets_platform_views(db, make_user):
    service = AdminService(db)
    customer = make_user()

    for call in (service.list_users, service.list_vendors, service.list_orders, service.dashboard_stats):
        with pytest.raises(Forbidden):
            call(customer.id)


def test_users_are_paged_and_filtered_by_role(db, admin, make_user, make_vendor):
    for _ in range(3):
        make_user()
    make_vendor()

    page = AdminService(db).list_users(admin.id, page=1, limit=2)
    assert page["total"] == 5
    assert page["total_pages"] == 3
    assert len(page["users"]) == 2

    vendors = AdminService(db).list_users(admin.id, role="vendor")
    assert [u.role for u in vendors["users"]] == ["VENDOR"]


def test_vendors_listed_with_product_counts(db, admin, make_vendor, make_product):
    busy = make_vendor("Lens House")
    make_product(busy)
    make_product(busy, name="Tripod")
    make_vendor("Empty Shop")

    vendors = {v["company_name"]: v for v in AdminService(db).list_vendors(admin.id)}

    assert vendors["Lens House"]["product_count"] == 2
    assert vendors["Empty Shop"]["product_count"] == 0
    assert vendors["Lens House"]["email"].endswith("@example.com")


def test_orders_show_invoice_total_and_paid_amount(db, admin, placed_orders):
    paid_id, pending_id = placed_orders

    page = AdminService(db).list_orders(admin.id)
    orders = {o["id"]: o for o in page["orders"]}

    assert page["total"] == 2
    assert orders[paid_id]["total_amount"] == Decimal("236.00")
    assert orders[paid_id]["paid_amount"] == Decimal("236.00")
    assert orders[pending_id]["paid_amount"] == Decimal("0.00")

    confirmed = AdminService(db).list_orders(admin.id, status="CONFIRMED")
    assert [o["id"] for o in confirmed["orders"]] == [paid_id]


def test_dashboard_counts_everything(db, admin, placed_orders):
    stats = AdminService(db).dashboard_stats(admin.id)

    # admin, dostawca i dwoch klientow
    assert stats["total_users"] == 4
    assert stats["total_vendors"] == 1
    assert stats["total_products"] == 1
    assert stats["total_orders"] == 2
    assert sorted(o["id"] for o in stats["recent_orders"]) == sorted(placed_orders)


def test_admin_can_create_another_admin(db, admin):
    created = AdminService(db).create_user(admin.id, AdminUserCreate(name="Ops", email="ops@example.com", role="ADMIN"))

    assert created.role == "ADMIN"
