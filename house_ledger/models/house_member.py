"""House membership model"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (Column, DateTime, Enum, ForeignKey, UniqueConstraint,
                        Uuid)
from sqlalchemy.orm import relationship

from house_ledger.database import Base


class InviteStatus(str, enum.Enum):
    """Membership invite state"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class HouseMember(Base):
    """Membership of a user in a house (read-only for the ledger)"""

    __tablename__ = "house_members"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    house_id = Column(Uuid, nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    invite_status = Column(
        Enum(
            InviteStatus,
            name="invite_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=InviteStatus.ACCEPTED,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("house_id", "user_id", name="uq_house_member"),
    )

    profile = relationship("Profile")

    def __repr__(self) -> str:
        return f"<HouseMember(house_id={self.house_id}, user_id={self.user_id}, status={self.invite_status})>"
