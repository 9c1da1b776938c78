"""
Extraction history model
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON, Enum

from metaextract.models.base import BaseModel
from metaextract.models.enums import ReportLevel, ExtractionStatus


class ExtractionHistory(BaseModel):
    """Audit record of one extraction call (not the extracted data)"""

    __tablename__ = "extraction_history"

    # Source
    connection_id = Column(String(100), nullable=False, index=True)
    account_id = Column(String(100), nullable=True)
    template_id = Column(String(100), nullable=True)

    # Shape of the request
    level = Column(Enum(ReportLevel), nullable=False)
    fields_extracted = Column(JSON, nullable=False, default=list)
    breakdowns_used = Column(JSON, nullable=False, default=list)
    conversions_included = Column(JSON, nullable=False, default=list)

    # Resolved window (empty when the config never resolved)
    date_start = Column(Date, nullable=True)
    date_end = Column(Date, nullable=True)

    # Outcome
    records_count = Column(Integer, default=0)
    status = Column(Enum(ExtractionStatus), default=ExtractionStatus.PENDING, index=True)
    error_message = Column(Text, nullable=True)

    # Timing
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)
