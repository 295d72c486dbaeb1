"""Re-export all models so Base.metadata sees them."""

from apoio.db.models.donation import Donation
from apoio.db.models.user import User

__all__ = [
    "Donation",
    "User",
]
