from circles.models.user import User
from circles.models.post import Post
from circles.models.comment import Comment
from circles.models.friend_request import FriendRequest

__all__ = ["User", "Post", "Comment", "FriendRequest"]
