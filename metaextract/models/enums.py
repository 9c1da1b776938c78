"""
Enums for extraction models
"""
import enum


class ReportLevel(str, enum.Enum):
    """Aggregation granularity of an insights query"""
    CAMPAIGN = "campaign"
    ADSET = "adset"
    AD = "ad"


class FieldCategory(str, enum.Enum):
    """Field grouping used by the field picker"""
    DIMENSION = "dimension"        # Names, ids, dates
    DELIVERY = "delivery"          # Impressions, reach
    PERFORMANCE = "performance"    # Clicks, CTR
    COST = "cost"                  # Spend, CPC, CPM
    CONVERSION = "conversion"
    ENGAGEMENT = "engagement"
    VIDEO = "video"
    ATTRIBUTION = "attribution"


class FieldDataType(str, enum.Enum):
    """Value type, used by renderers to format a column"""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE = "date"


class DatePreset(str, enum.Enum):
    """Symbolic date ranges"""
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last_7_days"
    LAST_14_DAYS = "last_14_days"
    LAST_30_DAYS = "last_30_days"
    LAST_90_DAYS = "last_90_days"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_QUARTER = "this_quarter"
    LAST_QUARTER = "last_quarter"
    THIS_YEAR = "this_year"
    LAST_YEAR = "last_year"
    LIFETIME = "lifetime"
    CUSTOM = "custom"


class ExtractionPhase(str, enum.Enum):
    """Phases reported to the progress sink"""
    VALIDATING = "validating"
    FETCHING_DATA = "fetching_data"
    PROCESSING = "processing"
    SAVING = "saving"
    COMPLETE = "complete"
    ERROR = "error"


class ExtractionStatus(str, enum.Enum):
    """Status of an extraction history entry"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
