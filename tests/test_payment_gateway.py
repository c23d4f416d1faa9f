import json
from decimal import Decimal

import pytest
import requests
import responses

from marketplace.domain.errors import PaymentGatewayError
from marketplace.services.payment_gateway import PaymentGatewayClient, compute_signature

BASE = "https://gateway.example.com/v1"


@pytest.fixture
def client():
    return PaymentGatewayClient(base_url=BASE, key_id="key_id", key_secret="secret", currency="INR")


@responses.activate
def test_create_order_sends_amount_in_minor_units(client):
    responses.add(responses.POST, f"{BASE}/orders", json={"id": "order_9", "amount": 59050}, status=200)

    intent = client.create_order(Decimal("590.50"), receipt="cart-1-v3")

    assert intent["id"] == "order_9"
    body = json.loads(responses.calls[0].request.body)
    assert body == {"amount": 59050, "currency": "INR", "receipt": "cart-1-v3"}
    assert responses.calls[0].request.headers["Authorization"].startswith("Basic ")


@responses.activate
def test_create_order_is_not_retried(client):
    responses.add(responses.POST, f"{BASE}/orders", status=503)

    with pytest.raises(PaymentGatewayError):
        client.create_order(Decimal("10"), receipt="cart-1-v1")

    assert len(responses.calls) == 1


@responses.activate
def test_fetch_payment_retries_transient_errors(client):
    responses.add(responses.GET, f"{BASE}/payments/pay_1", status=502)
    responses.add(
        responses.GET,
        f"{BASE}/payments/pay_1",
        json={"id": "pay_1", "order_id": "order_9", "amount": 1000, "status": "captured"},
        status=200,
    )

    payment = client.fetch_payment("pay_1")

    assert payment["status"] == "captured"
    assert len(responses.calls) == 2


@responses.activate
def test_fetch_payment_gives_up_after_three_attempts(client):
    responses.add(responses.GET, f"{BASE}/payments/pay_1", body=requests.ConnectionError("down"))

    with pytest.raises(PaymentGatewayError):
        client.fetch_payment("pay_1")

    assert len(responses.calls) == 3


@responses.activate
def test_fetch_payment_does_not_retry_client_errors(client):
    responses.add(responses.GET, f"{BASE}/payments/pay_x", json={"error": "not found"}, status=404)

    with pytest.raises(PaymentGatewayError):
        client.fetch_payment("pay_x")

    assert len(responses.calls) == 1


def test_signature_is_hmac_of_order_and_payment(client):
    signature = compute_signature("secret", "order_9", "pay_1")

    assert client.verify_signature("order_9", "pay_1", signature)
    assert not client.verify_signature("order_9", "pay_2", signature)
    assert not client.verify_signature("order_9", "pay_1", "0" * 64)


def test_non_ascii_signature_does_not_match(client):
    assert not client.verify_signature("order_9", "pay_1", "é" * 64)
