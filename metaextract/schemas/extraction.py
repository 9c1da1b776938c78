"""
Schemas for configurable extraction

Request/response models accept and emit the camelCase keys used by the
web client (``selectedFields``, ``totalRecords``); Python code uses the
snake_case attribute names.
"""
from typing import Optional, List, Tuple, Dict, Any
from datetime import date, datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from metaextract.models.enums import (
    ReportLevel,
    DatePreset,
    FieldCategory,
    FieldDataType,
    ExtractionPhase,
    ExtractionStatus,
)

# One output row: field id -> scalar (None when the upstream row has no value)
ExtractedRecord = Dict[str, Any]


class DateRangeConfig(BaseModel):
    """Requested period, symbolic or explicit"""

    preset: DatePreset = DatePreset.LAST_30_DAYS
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    include_today: bool = True

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class ResolvedDateRange(BaseModel):
    """Concrete calendar window"""

    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class ExtractionConfig(BaseModel):
    """One extraction request; immutable once built"""

    connection_id: Optional[str] = None
    account_id: Optional[str] = None
    level: ReportLevel = ReportLevel.CAMPAIGN
    selected_fields: Tuple[str, ...] = ()
    breakdowns: Tuple[str, ...] = ()
    conversions: Tuple[str, ...] = ()
    date_range: DateRangeConfig = DateRangeConfig()
    limit: Optional[int] = Field(None, ge=0)  # 0 or None = no limit
    template_id: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class ResultColumnMeta(BaseModel):
    """Column descriptor mirroring one selected field"""

    field: str
    display_name: str
    data_type: FieldDataType
    category: FieldCategory

    class Config:
        populate_by_name = True
        alias_generator = to_camel


class ResultDateRange(BaseModel):
    """Window reported back to the caller (ISO dates, empty on failure)"""

    start: str = ""
    end: str = ""


class ExtractionResult(BaseModel):
    """Outcome of one extraction"""

    success: bool
    data: List[ExtractedRecord] = []
    columns: List[ResultColumnMeta] = []
    total_records: int = 0
    date_range: ResultDateRange = ResultDateRange()
    duration_ms: int = 0
    error: Optional[str] = None
    warnings: List[str] = []

    class Config:
        populate_by_name = True
        alias_generator = to_camel


class ExtractionProgress(BaseModel):
    """Progress event delivered to the caller's sink"""

    phase: ExtractionPhase
    current: int = 0
    total: int = 0
    message: str = ""
    percentage: int = 0

    class Config:
        populate_by_name = True
        alias_generator = to_camel


class ExtractionHistoryResponse(BaseModel):
    """Extraction history entry"""

    id: int
    connection_id: str
    account_id: Optional[str] = None
    template_id: Optional[str] = None
    level: ReportLevel
    fields_extracted: List[str] = []
    breakdowns_used: List[str] = []
    conversions_included: List[str] = []
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    records_count: int = 0
    status: ExtractionStatus
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_ms: Optional[int] = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel
