"""Profile model"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from house_ledger.database import Base


class Profile(Base):
    """
    Display identity of a user.

    Rows are owned by the identity service; the ledger only reads them to
    label payers, debtors and settlers.
    """

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    display_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    venmo_handle = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, display_name={self.display_name})>"
