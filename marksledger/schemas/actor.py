# marksledger/schemas/actor.py
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

class Actor(BaseModel):
    """Caller identity supplied by the external auth layer"""
    id: Optional[UUID] = Field(default=None, description="User id stamped on entered_by/updated_by")
    role: str = Field(default="", description="Role name, e.g. ADMIN or SUPER_ADMIN")
