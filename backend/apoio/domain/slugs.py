"""Public username slugs."""

import re
import unicodedata

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def create_slug(text: str) -> str:
    """Lowercase ASCII slug: accents dropped, runs of other characters become '-'.

    >>> create_slug("  João da Silva! ")
    'joao-da-silva'
    """
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG.sub("-", normalized.lower()).strip("-")
