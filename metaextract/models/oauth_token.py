"""
Stored Meta access tokens
"""
from sqlalchemy import Column, String, Text, DateTime

from metaextract.models.base import BaseModel


class OAuthToken(BaseModel):
    """Access token issued for one Meta connection"""

    __tablename__ = "oauth_tokens"

    connection_id = Column(String(100), nullable=False, unique=True, index=True)
    account_id = Column(String(100), nullable=True)  # act_xxx

    access_token = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
