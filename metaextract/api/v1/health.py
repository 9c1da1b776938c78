"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from metaextract.core.config import settings
from metaextract.core.deps import get_db
from metaextract.models.extraction_history import ExtractionHistory

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    """Service status and the Graph API version extractions will use"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "graph_api_version": settings.FACEBOOK_API_VERSION,
        "fallback_token_configured": bool(settings.FACEBOOK_ACCESS_TOKEN),
    }


@router.get("/health/db")
def database_health(db: Session = Depends(get_db)):
    """History store reachable and readable"""
    try:
        entries = db.query(func.count(ExtractionHistory.id)).scalar()
    except SQLAlchemyError as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        }
    return {
        "status": "healthy",
        "database": "connected",
        "extraction_history_entries": entries,
    }
