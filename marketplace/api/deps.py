# marketplace/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.payment_gateway import PaymentGatewayClient


def get_gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient()


def get_lock_service() -> LockService:
    return LockService()


def get_checkout_service(
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_gateway),
    lock_service: LockService = Depends(get_lock_service),
) -> CheckoutService:
    return CheckoutService(
        db=db,
        gateway=gateway,
        lock_service=lock_service,
        notifications=NotificationService(),
    )
