from typing import Annotated, List, Optional
from pydantic import AliasChoices, Field, StringConstraints
from datetime import datetime
import uuid

from circles.schemas.common import CamelModel

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=120)]
Body = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=2000)]


class PostCreate(CamelModel):
    title: Title
    content: Body


class PostUpdate(CamelModel):
    title: Optional[Title] = None
    content: Optional[Body] = None


class PostRead(CamelModel):
    id: uuid.UUID
    title: str
    content: str
    author: uuid.UUID = Field(
        validation_alias=AliasChoices("author_id", "author"),
        serialization_alias="author",
    )
    liked_by: List[uuid.UUID] = []
    comments: List[uuid.UUID] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class CommentCreate(CamelModel):
    content: Body


class CommentUpdate(CamelModel):
    content: Body


class CommentRead(CamelModel):
    id: uuid.UUID
    content: str
    author: uuid.UUID = Field(
        validation_alias=AliasChoices("author_id", "author"),
        serialization_alias="author",
    )
    post: uuid.UUID = Field(
        validation_alias=AliasChoices("post_id", "post"),
        serialization_alias="post",
    )
    liked_by: List[uuid.UUID] = []
    created_at: datetime
