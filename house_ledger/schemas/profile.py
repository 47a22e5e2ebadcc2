"""Profile schemas"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    """Display identity attached to expenses and splits"""

    id: UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
