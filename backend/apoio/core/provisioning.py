"""User provisioning on first login.

Idempotent: creates the User row for a session subject the first time it
is seen. A concurrent insert for the same id surfaces as IntegrityError and
is resolved by re-reading the row.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from apoio.db.base import get_session_factory
from apoio.db.models.user import User


async def provision_user_on_first_login(
    user_id: str,
    claims: dict,
    session: AsyncSession | None = None,
) -> User:
    """Return the User for ``user_id``, creating it from session claims if missing.

    Args:
        user_id: Session subject
        claims: Token claims containing name, email, picture
        session: Optional AsyncSession for testing (if None, creates new session)
    """
    if session is not None:
        return await _do_provision(user_id, claims, session)

    factory = get_session_factory()
    async with factory() as session:
        return await _do_provision(user_id, claims, session)


async def _do_provision(user_id: str, claims: dict, session: AsyncSession) -> User:
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    session.add(
        User(
            id=user_id,
            name=claims.get("name"),
            email=claims.get("email"),
            image=claims.get("picture"),
        )
    )
    try:
        await session.commit()
    except IntegrityError:
        # Another request provisioned the same user first
        await session.rollback()

    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one()
