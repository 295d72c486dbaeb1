"""Stripe webhook endpoint."""

import stripe
import structlog
from fastapi import APIRouter, HTTPException, Request

from apoio.core.config import get_settings
from apoio.services import webhook_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/stripe/webhook")
async def stripe_webhook(request: Request):
    """Verify the Stripe signature, then reconcile the event.

    Only verification failures produce an error status. Once the event is
    verified the response is always ``{"ok": true}``.
    """
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        logger.error("stripe_webhook_secret_missing")
        raise HTTPException(status_code=503, detail="Stripe webhook endpoint is not configured")

    body = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not sig_header:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    try:
        event = stripe.Webhook.construct_event(body, sig_header, settings.stripe_webhook_secret)
    except ValueError:
        logger.warning("stripe_webhook_invalid_payload")
        raise HTTPException(status_code=400, detail="Webhook Error")
    except stripe.SignatureVerificationError:
        logger.warning("stripe_webhook_invalid_signature")
        raise HTTPException(status_code=400, detail="Webhook Error")

    try:
        await webhook_service.handle_event(event)
    except Exception as exc:
        logger.error(
            "stripe_webhook_processing_failed",
            event_id=event.get("id"),
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )

    return {"ok": True}
