"""House roster schemas"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RosterMember(BaseModel):
    """A house member as seen by the balance views"""

    user_id: UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    venmo_handle: Optional[str] = None

    model_config = ConfigDict(frozen=True)
