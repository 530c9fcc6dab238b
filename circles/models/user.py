from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Uuid
import uuid

from circles.core.config import settings
from circles.core.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    username = Column(String(120), unique=True, nullable=False, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    name = Column(String(120), nullable=False)
    bio = Column(Text, nullable=True)
    avatar = Column(String, nullable=False, default=lambda: settings.DEFAULT_AVATAR_URL)

    # Back-references, stored as lists of id strings
    posts = Column(JSON, nullable=False, default=list)
    friends = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    def is_friend_of(self, user_id) -> bool:
        return str(user_id) in (self.friends or [])
