from typing import Optional
from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import uuid

from circles.core.security import decode_token
from circles.utils.exceptions import AuthenticationError
from circles.utils.ids import to_entity_id

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """Resolve the requester id from the bearer access token"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Unauthorized", status_code=status.HTTP_403_FORBIDDEN)
    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("id"):
        raise AuthenticationError("Unauthorized", status_code=status.HTTP_403_FORBIDDEN)
    return to_entity_id(payload["id"])
