# marketplace/services/payment_gateway.py
import hashlib
import hmac
from decimal import Decimal

import requests
from requests import RequestException

from marketplace.domain.errors import PaymentGatewayError
from marketplace.utils.money import to_minor_units
from marketplace.utils.retry import http_retry
from marketplace.utils.settings import (
    PAYMENT_CURRENCY,
    PAYMENT_GATEWAY_KEY_ID,
    PAYMENT_GATEWAY_KEY_SECRET,
    PAYMENT_GATEWAY_URL,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """HMAC-SHA256 z "order_id|payment_id", hex."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class PaymentGatewayClient:
    """
    Klient bramki platnosci (API w stylu Razorpay):
    -tworzenie zamowienia platnosci (intent)
    -pobranie platnosci do weryfikacji kwoty
    -weryfikacja podpisu callbacku
    """

    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        currency: str | None = None,
        timeout: int = 5,
    ):
        self.base_url = (base_url or PAYMENT_GATEWAY_URL).rstrip("/")
        self.key_id = key_id if key_id is not None else PAYMENT_GATEWAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else PAYMENT_GATEWAY_KEY_SECRET
        self.currency = currency or PAYMENT_CURRENCY
        self.timeout = timeout

    @property
    def auth(self):
        return (self.key_id, self.key_secret)

    def create_order(self, amount: Decimal, receipt: str) -> dict:
        # POST nie jest ponawiany, kazda proba tworzy nowe zamowienie w bramce
        url = f"{self.base_url}/orders"
        payload = {
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "receipt": receipt,
        }
        logger.info(f"PaymentGateway POST {url} receipt={receipt}")

        try:
            resp = requests.post(url, json=payload, auth=self.auth, timeout=self.timeout)
            resp.raise_for_status()
        except RequestException as e:
            logger.error(f"Payment gateway order creation failed: {e}")
            raise PaymentGatewayError("Payment gateway is unavailable") from e

        return resp.json()

    @http_retry()
    def _get_payment(self, payment_id: str) -> dict:
        url = f"{self.base_url}/payments/{payment_id}"
        logger.info(f"PaymentGateway GET {url}")

        resp = requests.get(url, auth=self.auth, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def fetch_payment(self, payment_id: str) -> dict:
        try:
            return self._get_payment(payment_id)
        except RequestException as e:
            logger.error(f"Payment gateway lookup of {payment_id} failed: {e}")
            raise PaymentGatewayError("Payment gateway is unavailable") from e

    def verify_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        expected = compute_signature(self.key_secret, gateway_order_id, gateway_payment_id)
        # bajty: compare_digest na str z nie-ASCII rzuca TypeError
        return hmac.compare_digest(expected.encode(), signature.encode())
