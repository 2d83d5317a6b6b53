"""
API Router - all endpoints.
"""
from fastapi import APIRouter
from roomsync.router.api.v1 import auth, chat

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    chat.router,
    prefix="/chat",
    tags=["Chat"],
)
