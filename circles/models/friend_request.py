from sqlalchemy import Column, String, DateTime, Integer, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from circles.core.database import Base, utcnow


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    sender_id = Column(Uuid, nullable=False, index=True)
    receiver_id = Column(Uuid, nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending")  # pending, accepted, rejected

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False, default=1)

    sender = relationship(
        "User",
        primaryjoin="foreign(FriendRequest.sender_id) == User.id",
        viewonly=True,
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("sender_id <> receiver_id", name="friend_request_not_self"),
    )
    __mapper_args__ = {"version_id_col": version}
