"""Request correlation ids.

Every response carries ``X-Request-ID``. An incoming id (from the frontend or
a proxy in front of the Stripe webhook) is reused, otherwise one is minted.
The same id is stamped on each log entry of the request by
``apoio.core.logging.add_correlation_id``.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: uuid.uuid4().hex,
        validator=None,
        update_request_header=True,
    )


def get_correlation_id() -> str | None:
    """Id of the request being handled, or None outside a request."""
    return correlation_id.get(None)
