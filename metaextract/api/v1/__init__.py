"""
API v1 routes
"""
from fastapi import APIRouter

from metaextract.api.v1 import extraction, health

api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(health.router)
api_router.include_router(extraction.router)
