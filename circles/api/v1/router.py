from fastapi import APIRouter

from circles.api.v1.endpoints import auth, users, friend_requests, posts, feed

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(friend_requests.router, prefix="/requests", tags=["friend requests"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])
