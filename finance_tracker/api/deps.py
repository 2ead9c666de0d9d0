"""
Shared API dependencies.

Authentication happens upstream: the gateway verifies the
session and forwards the user's id in the X-User-Id header.
This layer only parses it.
"""

import uuid

from fastapi import Header, HTTPException

from finance_tracker.exceptions import (
    LedgerError,
    InvalidCombinationError,
    NotFoundError,
)


def get_current_user_id(
    x_user_id: str = Header(..., alias="X-User-Id"),
) -> uuid.UUID:
    """The authenticated user's id, as forwarded by the gateway."""
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user identity")


def to_http_exception(error: LedgerError) -> HTTPException:
    """
    Map a ledger error to an HTTP error.

    Storage failures get a fixed message: the database error
    text is logged by the service and never sent to clients.
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidCombinationError):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=500, detail="Internal server error")
