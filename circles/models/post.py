from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid

from circles.core.database import Base, utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String(120), nullable=False)
    content = Column(Text, nullable=False)

    # Integrity with users is kept by the reference maintainer, not the store
    author_id = Column(Uuid, nullable=False, index=True)

    liked_by = Column(JSON, nullable=False, default=list)
    comments = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False, default=1)

    author = relationship(
        "User",
        primaryjoin="foreign(Post.author_id) == User.id",
        viewonly=True,
        lazy="raise",
    )

    __mapper_args__ = {"version_id_col": version}
