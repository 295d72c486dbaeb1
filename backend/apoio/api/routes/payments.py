"""Donor-facing routes: checkout initiation and public creator profiles.

No authentication: donors are anonymous.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import JSONResponse

from apoio.db.base import get_session_factory
from apoio.schemas.payments import CreatePaymentResponse
from apoio.schemas.profile import CreatorProfile
from apoio.services import payment_service, profile_service

router = APIRouter()


@router.post("/payments", response_model=CreatePaymentResponse, response_model_exclude_none=True)
async def create_payment(payload: Any = Body(...)):
    """Create a pending donation and return the Stripe checkout session id."""
    factory = get_session_factory()
    async with factory() as session:
        result = await payment_service.create_payment(session, payload)

    if result.error:
        return JSONResponse(status_code=400, content={"error": result.error})
    return result


@router.get("/creators/{username}", response_model=CreatorProfile)
async def get_creator(username: str):
    """Public profile shown on a creator's donation page."""
    factory = get_session_factory()
    async with factory() as session:
        profile = await profile_service.get_creator_by_username(session, username)

    if profile is None:
        raise HTTPException(status_code=404, detail="Creator not found")
    return profile
