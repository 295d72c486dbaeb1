"""ProfileService: public creator lookup and the creator's own profile edits."""

from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.core.exceptions import (
    PROFILE_SAVE_FAILED_MESSAGE,
    UNAUTHENTICATED_MESSAGE,
    USERNAME_SAVE_FAILED_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
)
from apoio.db.models.user import User
from apoio.domain.slugs import create_slug
from apoio.schemas.profile import CreatorProfile, ProfileUpdateResult

logger = structlog.get_logger(__name__)

MIN_NAME_LENGTH = 4
MIN_BIO_LENGTH = 4
MIN_USERNAME_LENGTH = 4

NAME_TOO_SHORT_MESSAGE = "O username precisa ter no mínimo 4 caracteres"
BIO_TOO_SHORT_MESSAGE = "A descrição precisa ter no mínimo 4 caracteres"
USERNAME_REQUIRED_MESSAGE = "O username é obrigatório."
USERNAME_TOO_SHORT_MESSAGE = "O username deve ter no mínimo 4 caracteres."


async def get_creator_by_username(session: AsyncSession, username: Any) -> CreatorProfile | None:
    """Public profile for a creator page, or None."""
    if not isinstance(username, str):
        return None

    try:
        result = await session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
    except Exception as exc:
        logger.error("creator_lookup_failed", username=username, error=str(exc))
        return None

    if user is None:
        return None
    return CreatorProfile.model_validate(user)


async def get_own_profile(session: AsyncSession, user_id: str) -> CreatorProfile | None:
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return CreatorProfile.model_validate(user) if user is not None else None


async def _update_user_field(
    session: AsyncSession,
    user_id: str,
    field: str,
    value: str,
) -> ProfileUpdateResult:
    try:
        result = await session.execute(update(User).where(User.id == user_id).values({field: value}))
        await session.commit()
    except Exception as exc:
        await session.rollback()
        logger.error("profile_update_failed", user_id=user_id, field=field, error=str(exc))
        return ProfileUpdateResult(error=PROFILE_SAVE_FAILED_MESSAGE)

    if not result.rowcount:
        logger.warning("profile_update_no_user", user_id=user_id, field=field)
        return ProfileUpdateResult(error=PROFILE_SAVE_FAILED_MESSAGE)

    logger.info("profile_updated", user_id=user_id, field=field)
    return ProfileUpdateResult(data=value)


async def change_name(session: AsyncSession, user_id: str | None, name: str | None) -> ProfileUpdateResult:
    if not user_id:
        return ProfileUpdateResult(error=UNAUTHENTICATED_MESSAGE)
    if not name or len(name) < MIN_NAME_LENGTH:
        return ProfileUpdateResult(error=NAME_TOO_SHORT_MESSAGE)
    return await _update_user_field(session, user_id, "name", name)


async def change_bio(session: AsyncSession, user_id: str | None, description: str | None) -> ProfileUpdateResult:
    if not user_id:
        return ProfileUpdateResult(error=UNAUTHENTICATED_MESSAGE)
    if not description or len(description) < MIN_BIO_LENGTH:
        return ProfileUpdateResult(error=BIO_TOO_SHORT_MESSAGE)
    return await _update_user_field(session, user_id, "bio", description)


async def create_username(session: AsyncSession, user_id: str | None, username: str | None) -> ProfileUpdateResult:
    """Claim a public username for ``user_id``.

    The stored value is the slug of ``username``. The pre-check gives a
    friendly message for the common case; the unique index on
    ``users.username`` settles concurrent claims.
    """
    if not user_id:
        return ProfileUpdateResult(error=UNAUTHENTICATED_MESSAGE)
    if username is None:
        return ProfileUpdateResult(error=USERNAME_REQUIRED_MESSAGE)
    if len(username) < MIN_USERNAME_LENGTH:
        return ProfileUpdateResult(error=USERNAME_TOO_SHORT_MESSAGE)

    slug = create_slug(username)
    if len(slug) < MIN_USERNAME_LENGTH:
        return ProfileUpdateResult(error=USERNAME_TOO_SHORT_MESSAGE)

    try:
        result = await session.execute(
            select(User.id).where(User.username == slug, User.id != user_id)
        )
        if result.first() is not None:
            return ProfileUpdateResult(error=USERNAME_TAKEN_MESSAGE)

        await session.execute(update(User).where(User.id == user_id).values(username=slug))
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("username_claim_conflict", user_id=user_id, username=slug)
        return ProfileUpdateResult(error=USERNAME_TAKEN_MESSAGE)
    except Exception as exc:
        await session.rollback()
        logger.error("username_update_failed", user_id=user_id, error=str(exc))
        return ProfileUpdateResult(error=USERNAME_SAVE_FAILED_MESSAGE)

    logger.info("username_claimed", user_id=user_id, username=slug)
    return ProfileUpdateResult(data=slug)
