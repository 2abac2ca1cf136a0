"""
API router.
"""
from fastapi import APIRouter

from app.integrations.router import router as integrations_router

api_router = APIRouter()

# Include all endpoint routers (prefixes are set on the routers themselves)
api_router.include_router(integrations_router)
