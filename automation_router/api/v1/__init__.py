"""
API v1 router initialization and setup.
"""
from fastapi import APIRouter
from .endpoints import router

api_router = APIRouter()

api_router.include_router(
    router.router,
    prefix="/router",
    tags=["router"]
)
