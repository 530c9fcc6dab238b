from typing import Optional
from pydantic import AliasChoices, Field
from datetime import datetime
from enum import Enum
import uuid

from circles.schemas.common import CamelModel
from circles.schemas.user import UserPublic


class FriendRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class FriendRequestCreate(CamelModel):
    # Missing receiver surfaces as a 404, not a validation error
    receiver: Optional[str] = None


class FriendRequestRead(CamelModel):
    id: uuid.UUID
    sender: uuid.UUID = Field(
        validation_alias=AliasChoices("sender_id", "sender"),
        serialization_alias="sender",
    )
    receiver: uuid.UUID = Field(
        validation_alias=AliasChoices("receiver_id", "receiver"),
        serialization_alias="receiver",
    )
    status: FriendRequestStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class FriendRequestWithSender(FriendRequestRead):
    sender: UserPublic
