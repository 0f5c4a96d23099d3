# marksledger/routers/deps.py
from typing import Optional
from uuid import UUID
from fastapi import Header

from ..core.exceptions import ValidationException
from ..schemas.actor import Actor


async def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None)
) -> Actor:
    """Caller identity forwarded by the upstream auth layer"""
    actor_id = None
    if x_actor_id:
        try:
            actor_id = UUID(x_actor_id)
        except ValueError:
            raise ValidationException("X-Actor-Id must be a UUID")
    return Actor(id=actor_id, role=(x_actor_role or "").strip().upper())
