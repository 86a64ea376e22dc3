"""
Request identity.

The identity provider sits in front of the service and forwards the
signed-in user's opaque id as a header.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status


async def optional_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """The caller's user id, or None for anonymous requests."""
    return x_user_id or None


async def current_user_id(
    user_id: Annotated[str | None, Depends(optional_user_id)],
) -> str:
    """The caller's user id. Rejects anonymous requests."""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required (missing X-User-ID header)",
        )
    return user_id


CurrentUser = Annotated[str, Depends(current_user_id)]
OptionalUser = Annotated[str | None, Depends(optional_user_id)]
