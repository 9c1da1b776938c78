"""
Schemas for the field / breakdown catalog endpoints
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from metaextract.models.enums import ReportLevel, FieldCategory, FieldDataType, DatePreset


class CatalogSchema(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class FieldDefinitionResponse(CatalogSchema):
    """Extractable metric or dimension"""
    id: str
    display_name: str
    description: str
    api_field: str
    category: FieldCategory
    data_type: FieldDataType
    available_levels: List[ReportLevel]
    display_order: int
    is_popular: bool = False


class BreakdownDefinitionResponse(CatalogSchema):
    """Segmentation dimension"""
    id: str
    display_name: str
    description: str
    api_field: str
    possible_values: List[str] = []
    incompatible_with: List[str] = []
    is_time_breakdown: bool = False


class StandardConversionResponse(CatalogSchema):
    id: str
    display_name: str
    action_type: str
    description: str
    category: str


class DatePresetResponse(CatalogSchema):
    id: DatePreset
    label: str
    days: Optional[int] = None


class ReportTemplateResponse(CatalogSchema):
    """Built-in report template"""
    name: str
    description: str
    level: ReportLevel
    fields: List[str]
    breakdowns: List[str] = []


class CustomConversionResponse(CatalogSchema):
    id: str
    name: str
    custom_event_type: Optional[str] = None


class AvailableConversionsResponse(CatalogSchema):
    """Conversions seen on an ad account"""
    account_id: str
    action_types: List[str] = []
    custom_conversions: List[CustomConversionResponse] = []


class AdAccountResponse(CatalogSchema):
    id: str
    name: Optional[str] = None
    account_status: Optional[int] = None
    currency: Optional[str] = None
    timezone_name: Optional[str] = None


class FieldCategoryResponse(CatalogSchema):
    """Field picker group"""
    id: FieldCategory
    label: str
    field_count: int = 0


class SavedTemplateCreate(CatalogSchema):
    """Request body for saving a report template"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    level: ReportLevel = ReportLevel.CAMPAIGN
    selected_fields: List[str]
    breakdowns: List[str] = []
    date_preset: DatePreset = DatePreset.LAST_30_DAYS
    is_default: bool = False


class SavedTemplateResponse(SavedTemplateCreate):
    """Saved report template"""
    id: int
    created_at: Optional[datetime] = None
