"""Integration tests for the Stripe webhook endpoint.

Tests cover:
- 503 when the webhook secret is not configured (fail closed)
- 400 on missing or invalid signature, with no database write
- checkout.session.completed marks the donation PAID and returns {"ok": true}
- Failures after verification are still acknowledged
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import stripe
from fastapi.testclient import TestClient
from sqlalchemy import select

from apoio.db.models.donation import Donation

pytestmark = pytest.mark.integration

WEBHOOK_URL = "/api/stripe/webhook"
SIGNED = {"stripe-signature": "t=1,v1=abc", "Content-Type": "application/json"}


def _make_stripe_event(event_id: str, event_type: str, data: dict) -> dict:
    """Build a minimal Stripe-style event dict."""
    return {
        "id": event_id,
        "type": event_type,
        "data": {"object": data},
    }


async def _status(fresh_session, donation_id: str) -> str:
    async with fresh_session() as session:
        result = await session.execute(select(Donation.status).where(Donation.id == donation_id))
        return result.scalar_one()


@pytest.fixture
async def pending_donation(creator, make_donation):
    return await make_donation(creator.id, status="PENDING")


def test_webhook_returns_503_when_secret_missing(api_client: TestClient):
    mock_settings = MagicMock()
    mock_settings.stripe_webhook_secret = ""

    with patch("apoio.api.routes.webhooks.get_settings", return_value=mock_settings):
        response = api_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    assert response.status_code == 503
    assert "not configured" in response.json()["detail"].lower()


def test_webhook_rejects_missing_signature(api_client: TestClient):
    response = api_client.post(
        WEBHOOK_URL,
        content=b'{"id": "evt_001", "type": "checkout.session.completed"}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "stripe-signature" in response.json()["detail"].lower()


async def test_webhook_rejects_invalid_signature_without_writing(api_client: TestClient, pending_donation, fresh_session):
    with (
        patch(
            "stripe.Webhook.construct_event",
            side_effect=stripe.SignatureVerificationError("Invalid signature", "t=0,v1=bad"),
        ),
        patch("apoio.integrations.stripe_gateway.retrieve_payment_intent", new_callable=AsyncMock) as mock_retrieve,
    ):
        response = api_client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    assert response.status_code == 400
    assert response.json()["detail"] == "Webhook Error"
    mock_retrieve.assert_not_called()
    assert await _status(fresh_session, pending_donation.id) == "PENDING"


def test_webhook_rejects_malformed_payload(api_client: TestClient):
    with patch("stripe.Webhook.construct_event", side_effect=ValueError("Invalid payload")):
        response = api_client.post(WEBHOOK_URL, content=b"not json", headers=SIGNED)

    assert response.status_code == 400
    assert response.json()["detail"] == "Webhook Error"


async def test_checkout_completed_marks_donation_paid(api_client: TestClient, pending_donation, fresh_session):
    event = _make_stripe_event("evt_paid_001", "checkout.session.completed", {"id": "cs_1", "payment_intent": "pi_1"})
    intent = {"id": "pi_1", "metadata": {"donationId": pending_donation.id, "donorName": "Carla", "donorMessage": "Valeu!"}}

    with (
        patch("stripe.Webhook.construct_event", return_value=event),
        patch("stripe.PaymentIntent.retrieve_async", new_callable=AsyncMock, return_value=intent),
    ):
        response = api_client.post(WEBHOOK_URL, content=b"payload", headers=SIGNED)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert await _status(fresh_session, pending_donation.id) == "PAID"


async def test_failure_after_verification_is_acknowledged(api_client: TestClient, pending_donation, fresh_session):
    event = _make_stripe_event("evt_fail_001", "checkout.session.completed", {"id": "cs_1", "payment_intent": "pi_1"})

    with (
        patch("stripe.Webhook.construct_event", return_value=event),
        patch("stripe.PaymentIntent.retrieve_async", new_callable=AsyncMock, side_effect=RuntimeError("stripe down")),
    ):
        response = api_client.post(WEBHOOK_URL, content=b"payload", headers=SIGNED)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert await _status(fresh_session, pending_donation.id) == "PENDING"


def test_unhandled_event_type_is_acknowledged(api_client: TestClient):
    event = _make_stripe_event("evt_other_001", "customer.created", {"id": "cus_1"})

    with patch("stripe.Webhook.construct_event", return_value=event):
        response = api_client.post(WEBHOOK_URL, content=b"payload", headers=SIGNED)

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_verified_event_without_data_is_acknowledged(api_client: TestClient):
    event = {"id": "evt_no_data_001", "type": "checkout.session.completed"}

    with patch("stripe.Webhook.construct_event", return_value=event):
        response = api_client.post(WEBHOOK_URL, content=b"payload", headers=SIGNED)

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_unexpected_processing_error_is_acknowledged(api_client: TestClient):
    event = _make_stripe_event("evt_boom_001", "checkout.session.completed", {"id": "cs_1", "payment_intent": "pi_1"})

    with (
        patch("stripe.Webhook.construct_event", return_value=event),
        patch(
            "apoio.services.webhook_service.handle_event",
            new_callable=AsyncMock,
            side_effect=RuntimeError("unexpected"),
        ),
    ):
        response = api_client.post(WEBHOOK_URL, content=b"payload", headers=SIGNED)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
