"""Stripe Connect account creation for the signed-in creator."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from apoio.core.auth import SessionUser, require_auth
from apoio.core.exceptions import (
    ACCOUNT_FAILED_MESSAGE,
    ACCOUNT_WITHOUT_ID_MESSAGE,
    AccountProvisioningError,
)
from apoio.db.base import get_session_factory
from apoio.services import account_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/stripe/create-account")
async def create_account(user: SessionUser = Depends(require_auth)):
    """Create the caller's connected account and return the onboarding URL."""
    factory = get_session_factory()
    try:
        async with factory() as session:
            url = await account_service.provision_connected_account(session, user.user_id)
    except AccountProvisioningError:
        logger.error("connected_account_missing_id", user_id=user.user_id)
        return JSONResponse(status_code=400, content={"error": ACCOUNT_WITHOUT_ID_MESSAGE})
    except Exception as exc:
        logger.error(
            "connected_account_failed",
            user_id=user.user_id,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"error": ACCOUNT_FAILED_MESSAGE})

    return {"url": url}
