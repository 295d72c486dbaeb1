"""Routes for the signed-in creator's own profile."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from apoio.core.auth import SessionUser, require_auth
from apoio.db.base import get_session_factory
from apoio.schemas.profile import (
    BioUpdateRequest,
    CreatorProfile,
    NameUpdateRequest,
    ProfileUpdateResult,
    UsernameRequest,
)
from apoio.services import profile_service

router = APIRouter()


def _respond(result: ProfileUpdateResult):
    if result.error:
        return JSONResponse(status_code=400, content=result.model_dump())
    return result


@router.get("", response_model=CreatorProfile)
async def get_me(user: SessionUser = Depends(require_auth)):
    factory = get_session_factory()
    async with factory() as session:
        profile = await profile_service.get_own_profile(session, user.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.patch("/name", response_model=ProfileUpdateResult)
async def change_name(body: NameUpdateRequest, user: SessionUser = Depends(require_auth)):
    factory = get_session_factory()
    async with factory() as session:
        result = await profile_service.change_name(session, user.user_id, body.name)
    return _respond(result)


@router.patch("/bio", response_model=ProfileUpdateResult)
async def change_bio(body: BioUpdateRequest, user: SessionUser = Depends(require_auth)):
    factory = get_session_factory()
    async with factory() as session:
        result = await profile_service.change_bio(session, user.user_id, body.description)
    return _respond(result)


@router.post("/username", response_model=ProfileUpdateResult)
async def create_username(body: UsernameRequest, user: SessionUser = Depends(require_auth)):
    """Claim the public username used in /creator/{username}."""
    factory = get_session_factory()
    async with factory() as session:
        result = await profile_service.create_username(session, user.user_id, body.username)
    return _respond(result)
