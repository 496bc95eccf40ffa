"""API routes."""

from fastapi import APIRouter

from proprio.api import session

api_router = APIRouter()

api_router.include_router(session.router, prefix="/session", tags=["Session"])
