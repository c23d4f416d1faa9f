from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from marketplace.data.models import CouponModel, OrderModel
from marketplace.domain.coupon_rules import check_eligibility, compute_discount
from marketplace.domain.errors import (
    BelowMinimum,
    Conflict,
    CouponExpired,
    CouponInactive,
    CouponLimitReached,
    Forbidden,
    NotFound,
    Unauthorized,
)
from marketplace.domain.schemas import CouponCreate, UserCreate
from marketplace.services.coupon_service import CouponService
from marketplace.services.user_service import UserService
from marketplace.utils.clock import utcnow


def coupon(**overrides):
    data = dict(
        is_active=True,
        user_id=None,
        is_welcome_coupon=False,
        expiry_date=None,
        max_usage_count=None,
        current_usage_count=0,
        min_order_amount=None,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.fixture
def add_coupon(db):
    def _add(code="SAVE10", discount_type="PERCENTAGE", value="10", **extra):
        c = CouponModel(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(value),
            current_usage_count=extra.pop("current_usage_count", 0),
            is_active=extra.pop("is_active", True),
            is_welcome_coupon=extra.pop("is_welcome_coupon", False),
            **extra,
        )
        db.add(c)
        db.commit()
        return c

    return _add


# ---------- rules ----------

def test_valid_coupon_passes_all_rules():
    check_eligibility(coupon(), Decimal("100"), 1, 0, utcnow())


@pytest.mark.parametrize(
    "overrides, user_id, prior_orders, error",
    [
        (dict(is_active=False), 1, 0, CouponInactive),
        (dict(user_id=5), None, 0, Unauthorized),
        (dict(user_id=5), 6, 0, Forbidden),
        (dict(is_welcome_coupon=True, user_id=1), 1, 1, Conflict),
        (dict(expiry_date=utcnow() - timedelta(days=1)), 1, 0, CouponExpired),
        (dict(max_usage_count=3, current_usage_count=3), 1, 0, CouponLimitReached),
        (dict(min_order_amount=Decimal("500")), 1, 0, BelowMinimum),
    ],
)
def test_each_rule_rejects(overrides, user_id, prior_orders, error):
    with pytest.raises(error):
        check_eligibility(coupon(**overrides), Decimal("100"), user_id, prior_orders, utcnow())


def test_first_failing_rule_wins():
    expired_and_inactive = coupon(is_active=False, expiry_date=utcnow() - timedelta(days=1))

    with pytest.raises(CouponInactive):
        check_eligibility(expired_and_inactive, Decimal("100"), 1, 0, utcnow())


def test_rejected_coupon_reports_kind():
    with pytest.raises(CouponExpired) as exc:
        check_eligibility(coupon(expiry_date=utcnow() - timedelta(seconds=1)), Decimal("1"), 1, 0, utcnow())

    assert exc.value.kind == "Expired"


def test_percentage_discount():
    assert compute_discount("PERCENTAGE", Decimal("12.5"), Decimal("199.99")) == Decimal("25.00")


def test_fixed_discount_is_capped_at_order_amount():
    assert compute_discount("FIXED_AMOUNT", Decimal("300"), Decimal("120.00")) == Decimal("120.00")


# ---------- service ----------

def test_validate_normalizes_code_and_computes_discount(db, add_coupon):
    add_coupon(code="SAVE10")

    result = CouponService(db).validate_coupon("  save10 ", Decimal("250.00"))

    assert result["discount_amount"] == Decimal("25.00")
    assert result["coupon"].code == "SAVE10"


def test_validate_unknown_code(db):
    with pytest.raises(NotFound):
        CouponService(db).validate_coupon("NOPE", Decimal("10"))


def test_validate_does_not_consume_usage(db, add_coupon):
    c = add_coupon(max_usage_count=1)

    CouponService(db).validate_coupon("SAVE10", Decimal("10"))
    CouponService(db).validate_coupon("SAVE10", Decimal("10"))

    db.refresh(c)
    assert c.current_usage_count == 0


def test_apply_stops_at_usage_limit(db, add_coupon, make_user):
    c = add_coupon(max_usage_count=2)
    service = CouponService(db)

    service.apply_coupon(c.id, make_user().id, Decimal("100"))
    applied = service.apply_coupon(c.id, make_user().id, Decimal("100"))
    assert applied.current_usage_count == 2

    with pytest.raises(CouponLimitReached):
        service.apply_coupon(c.id, make_user().id, Decimal("100"))


def test_apply_runs_the_same_rules_as_validate(db, add_coupon, make_user):
    owner = make_user()
    c = add_coupon(user_id=owner.id, min_order_amount=Decimal("200"))
    service = CouponService(db)

    with pytest.raises(Forbidden):
        service.apply_coupon(c.id, make_user().id, Decimal("500"))
    with pytest.raises(BelowMinimum):
        service.apply_coupon(c.id, owner.id, Decimal("100"))

    db.refresh(c)
    assert c.current_usage_count == 0


def test_release_never_goes_below_zero(db, add_coupon, make_user):
    c = add_coupon(max_usage_count=1)
    service = CouponService(db)

    service.apply_coupon(c.id, make_user().id, Decimal("10"))
    assert service.release_coupon(c.id).current_usage_count == 0
    assert service.release_coupon(c.id).current_usage_count == 0


def test_welcome_coupon_only_before_first_real_order(db, make_vendor):
    user = UserService(db).create_user(UserCreate(name="Asha", email="asha@example.com"))
    code = f"WELCOME-{user.id:06d}"
    service = CouponService(db)

    assert service.validate_coupon(code, Decimal("100"), user.id)["discount_amount"] == Decimal("10.00")

    order = OrderModel(order_number="ORD-1", user_id=user.id, vendor_id=make_vendor().id, status="CONFIRMED")
    db.add(order)
    db.commit()

    with pytest.raises(Conflict):
        service.validate_coupon(code, Decimal("100"), user.id)

    # anulowane zamowienie sie nie liczy
    order.status = "CANCELLED"
    db.commit()

    assert service.validate_coupon(code, Decimal("100"), user.id)["coupon"].code == code


def test_list_available_hides_expired_exhausted_and_foreign(db, add_coupon, make_user):
    owner = make_user()
    other = make_user()
    add_coupon(code="GLOBAL")
    add_coupon(code="OLD", expiry_date=utcnow() - timedelta(days=1))
    add_coupon(code="USED", max_usage_count=1, current_usage_count=1)
    add_coupon(code="MINE", user_id=owner.id)
    add_coupon(code="THEIRS", user_id=other.id)
    add_coupon(code="BIG", min_order_amount=Decimal("1000"))

    codes = [c.code for c in CouponService(db).list_available(owner.id, Decimal("500"))]

    assert codes == ["GLOBAL", "MINE"]


def test_only_admin_creates_coupons(db, make_user):
    payload = CouponCreate(code="spring", discount_type="FIXED_AMOUNT", discount_value=Decimal("50"))

    with pytest.raises(Forbidden):
        CouponService(db).create_coupon(make_user().id, payload)

    created = CouponService(db).create_coupon(make_user(role="ADMIN").id, payload)
    assert created.code == "SPRING"


def test_duplicate_coupon_code(db, make_user, add_coupon):
    add_coupon(code="SPRING")
    payload = CouponCreate(code="Spring", discount_type="PERCENTAGE", discount_value=Decimal("5"))

    with pytest.raises(Conflict):
        CouponService(db).create_coupon(make_user(role="ADMIN").id, payload)


def test_percentage_above_hundred_is_rejected():
    with pytest.raises(ValueError):
        CouponCreate(code="HUGE", discount_type="PERCENTAGE", discount_value=Decimal("150"))


def test_registration_issues_personal_welcome_coupon(db):
    user = UserService(db).create_user(UserCreate(name="Asha", email="asha@example.com"))

    available = CouponService(db).list_available(user.id)

    assert len(available) == 1
    welcome = available[0]
    assert welcome.code == f"WELCOME-{user.id:06d}"
    assert welcome.is_welcome_coupon
    assert welcome.user_id == user.id
    assert welcome.max_usage_count == 1


def test_duplicate_email_is_rejected(db):
    UserService(db).create_user(UserCreate(name="Asha", email="asha@example.com"))

    with pytest.raises(Conflict):
        UserService(db).create_user(UserCreate(name="Other", email="asha@example.com"))
