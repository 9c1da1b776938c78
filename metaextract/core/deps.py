"""
Dependency injection for FastAPI
"""
from typing import Callable, Generator, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from metaextract.core.config import settings
from metaextract.core.database import SessionLocal
from metaextract.models.oauth_token import OAuthToken
from metaextract.services.extraction.history import ExtractionHistoryRepository
from metaextract.services.extraction.templates import ReportTemplateRepository
from metaextract.services.facebook.fb_api import FacebookAPI

ApiFactory = Callable[[str], FacebookAPI]


def get_db() -> Generator:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_history_repository() -> ExtractionHistoryRepository:
    return ExtractionHistoryRepository(SessionLocal)


def get_template_repository() -> ReportTemplateRepository:
    return ReportTemplateRepository(SessionLocal)


def get_api_factory() -> ApiFactory:
    """Builds a Graph API client for an access token"""
    return lambda access_token: FacebookAPI(access_token=access_token)


def resolve_access_token(db: Session, connection_id: Optional[str]) -> str:
    """Stored token for the connection, else the configured fallback token"""
    token: Optional[OAuthToken] = None
    if connection_id:
        token = db.query(OAuthToken).filter(OAuthToken.connection_id == connection_id).first()

    access_token = token.access_token if token else settings.FACEBOOK_ACCESS_TOKEN
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Access token not found for this connection. Reconnect the Meta account.",
        )
    return access_token
