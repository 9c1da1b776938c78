"""
User-saved report templates
"""
from sqlalchemy import Column, String, Text, Boolean, JSON, Enum

from metaextract.models.base import BaseModel
from metaextract.models.enums import ReportLevel, DatePreset


class SavedReportTemplate(BaseModel):
    """Reusable extraction setup saved from the extractor"""

    __tablename__ = "report_templates"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    level = Column(Enum(ReportLevel), nullable=False, default=ReportLevel.CAMPAIGN)
    selected_fields = Column(JSON, nullable=False, default=list)
    breakdowns = Column(JSON, nullable=False, default=list)
    date_preset = Column(Enum(DatePreset), nullable=False, default=DatePreset.LAST_30_DAYS)

    is_default = Column(Boolean, nullable=False, default=False)
