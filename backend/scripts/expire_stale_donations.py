"""Cancel PENDING donations whose checkout was abandoned.

Usage (from backend/):
    python -m scripts.expire_stale_donations [--ttl-hours N]
"""

import argparse
import asyncio
from datetime import timedelta

from apoio.core.config import get_settings
from apoio.db import close_db, get_session_factory, init_db
from apoio.services.expiry_service import expire_stale_donations


async def main(ttl_hours: int) -> int:
    await init_db()
    try:
        factory = get_session_factory()
        async with factory() as session:
            expired = await expire_stale_donations(session, ttl=timedelta(hours=ttl_hours))
    finally:
        await close_db()

    print(f"Cancelled {expired} stale donation(s) older than {ttl_hours}h.")
    return expired


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--ttl-hours",
        type=int,
        default=get_settings().pending_donation_ttl_hours,
        help="Age after which a PENDING donation is cancelled",
    )
    args = parser.parse_args()
    asyncio.run(main(args.ttl_hours))
