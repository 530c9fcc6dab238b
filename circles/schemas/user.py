from typing import Annotated, List, Optional
from pydantic import StringConstraints, field_validator
from datetime import datetime
import uuid

from circles.schemas.common import CamelModel
from circles.schemas.post import PostRead

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=120)]
Bio = Annotated[str, StringConstraints(strip_whitespace=True, max_length=200)]


class UserUpdate(CamelModel):
    name: Optional[Name] = None
    bio: Optional[Bio] = None
    avatar: Optional[str] = None

    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("Please provide a valid URL.")
        return v


class UserPublic(CamelModel):
    """User record with credentials stripped"""
    id: uuid.UUID
    username: str
    email: str
    name: str
    bio: Optional[str] = None
    avatar: str
    posts: List[uuid.UUID] = []
    friends: List[uuid.UUID] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserWithPosts(UserPublic):
    posts: List[PostRead] = []
