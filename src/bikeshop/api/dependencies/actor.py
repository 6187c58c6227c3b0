"""Acting user dependency.

Authentication happens upstream; this service trusts the X-User-ID header
forwarded by the gateway and only checks that it is a well-formed UUID.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from src.bikeshop.core.logging import bind_actor_context


async def get_current_actor(
    x_user_id: Annotated[str | None, Header(alias="X-User-ID")] = None,
) -> UUID:
    """Resolve the acting user from the X-User-ID header."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )
    try:
        actor_id = UUID(x_user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-ID header",
        ) from e

    bind_actor_context(actor_id)
    return actor_id


CurrentActor = Annotated[UUID, Depends(get_current_actor)]
