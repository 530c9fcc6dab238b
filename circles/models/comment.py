from sqlalchemy import Column, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid

from circles.core.database import Base, utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Uuid, nullable=False, index=True)
    post_id = Column(Uuid, nullable=False, index=True)
    liked_by = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Bumped on every update; a write based on a stale read fails
    version = Column(Integer, nullable=False, default=1)

    author = relationship(
        "User",
        primaryjoin="foreign(Comment.author_id) == User.id",
        viewonly=True,
        lazy="raise",
    )

    __mapper_args__ = {"version_id_col": version}
