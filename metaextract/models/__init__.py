"""
Database models for Meta Extract
"""
from metaextract.models.base import Base, BaseModel, TimestampMixin
from metaextract.models.enums import (
    ReportLevel, FieldCategory, FieldDataType, DatePreset,
    ExtractionPhase, ExtractionStatus,
)

from metaextract.models.extraction_history import ExtractionHistory
from metaextract.models.oauth_token import OAuthToken
from metaextract.models.report_template import SavedReportTemplate


__all__ = [
    # Base
    "Base", "BaseModel", "TimestampMixin",

    # Enums
    "ReportLevel", "FieldCategory", "FieldDataType", "DatePreset",
    "ExtractionPhase", "ExtractionStatus",

    # Extraction
    "ExtractionHistory", "OAuthToken", "SavedReportTemplate",
]
