"""
Configurable Extraction API Endpoints
Catalog lookups, validation, extraction runs and history
"""
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from metaextract.core.deps import (
    ApiFactory,
    get_api_factory,
    get_db,
    get_history_repository,
    get_template_repository,
    resolve_access_token,
)
from metaextract.core.exceptions import ConfigurationError, UpstreamApiError
from metaextract.models.enums import ReportLevel
from metaextract.schemas.catalog import (
    AdAccountResponse,
    AvailableConversionsResponse,
    BreakdownDefinitionResponse,
    DatePresetResponse,
    FieldCategoryResponse,
    FieldDefinitionResponse,
    ReportTemplateResponse,
    SavedTemplateCreate,
    SavedTemplateResponse,
    StandardConversionResponse,
)
from metaextract.schemas.common import DataResponse, ListResponse
from metaextract.schemas.extraction import (
    DateRangeConfig,
    ExtractionConfig,
    ExtractionHistoryResponse,
    ExtractionResult,
    ResolvedDateRange,
)
from metaextract.services.extraction.breakdown_catalog import ALL_BREAKDOWNS
from metaextract.services.extraction.date_range import resolve_date_range
from metaextract.services.extraction.extract_service import ConfigurableExtractService
from metaextract.services.extraction.field_catalog import (
    ALL_FIELDS,
    CATEGORY_LABELS,
    FIELDS_BY_CATEGORY,
    get_fields_for_level,
    get_popular_fields,
)
from metaextract.services.extraction.history import ExtractionHistoryRepository
from metaextract.services.extraction.templates import ReportTemplateRepository
from metaextract.services.extraction.presets import (
    DATE_PRESETS,
    DEFAULT_TEMPLATES,
    STANDARD_CONVERSIONS,
)
from metaextract.services.extraction.validator import validate_config

router = APIRouter(prefix="/extraction", tags=["Extraction"])


# ========================================
# Catalog Endpoints
# ========================================

@router.get("/fields", response_model=List[FieldDefinitionResponse])
def list_fields(level: Optional[ReportLevel] = None):
    """Extractable fields, optionally only those available at ``level``"""
    fields = get_fields_for_level(level) if level else ALL_FIELDS
    return [FieldDefinitionResponse.model_validate(f) for f in fields]


@router.get("/fields/categories", response_model=List[FieldCategoryResponse])
def list_field_categories():
    """Field picker groups with their labels"""
    return [
        FieldCategoryResponse(id=category, label=label, field_count=len(FIELDS_BY_CATEGORY[category]))
        for category, label in CATEGORY_LABELS.items()
    ]


@router.get("/fields/popular", response_model=List[FieldDefinitionResponse])
def list_popular_fields():
    return [FieldDefinitionResponse.model_validate(f) for f in get_popular_fields()]


@router.get("/breakdowns", response_model=List[BreakdownDefinitionResponse])
def list_breakdowns():
    return [BreakdownDefinitionResponse.model_validate(b) for b in ALL_BREAKDOWNS]


@router.get("/conversions", response_model=List[StandardConversionResponse])
def list_standard_conversions():
    return [StandardConversionResponse.model_validate(c) for c in STANDARD_CONVERSIONS]


@router.get("/date-presets", response_model=List[DatePresetResponse])
def list_date_presets():
    return [DatePresetResponse.model_validate(p) for p in DATE_PRESETS]


@router.get("/templates", response_model=List[ReportTemplateResponse])
def list_templates():
    return [ReportTemplateResponse.model_validate(t) for t in DEFAULT_TEMPLATES]


@router.get("/templates/saved", response_model=ListResponse[SavedTemplateResponse])
def list_saved_templates(
    templates: ReportTemplateRepository = Depends(get_template_repository),
):
    """User-saved templates, newest first"""
    saved = templates.list_saved()
    return ListResponse(
        data=[SavedTemplateResponse.model_validate(t) for t in saved],
        total=len(saved),
    )


@router.post(
    "/templates/saved",
    response_model=DataResponse[SavedTemplateResponse],
    status_code=status.HTTP_201_CREATED,
)
def save_template(
    payload: SavedTemplateCreate,
    templates: ReportTemplateRepository = Depends(get_template_repository),
):
    """Save a template; its fields and breakdowns must be extractable at its level"""
    try:
        template = templates.create(payload)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return DataResponse(message="Template saved", data=SavedTemplateResponse.model_validate(template))


def _check_template(templates: ReportTemplateRepository, config: ExtractionConfig) -> None:
    if config.template_id and templates.get(config.template_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report template not found: {config.template_id}",
        )


# ========================================
# Validation Endpoints
# ========================================

@router.post("/date-range", response_model=ResolvedDateRange)
def resolve_range(date_range: DateRangeConfig):
    """Resolve a preset to concrete dates"""
    try:
        return resolve_date_range(date_range)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/validate", response_model=DataResponse[ResolvedDateRange])
def validate_extraction(
    config: ExtractionConfig,
    templates: ReportTemplateRepository = Depends(get_template_repository),
):
    """Check a configuration without calling the Meta API"""
    _check_template(templates, config)
    try:
        validate_config(config)
        resolved = resolve_date_range(config.date_range)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return DataResponse(message="Configuration is valid", data=resolved)


# ========================================
# Extraction Endpoints
# ========================================

@router.post("/extract", response_model=ExtractionResult)
async def run_extraction(
    config: ExtractionConfig,
    db: Session = Depends(get_db),
    api_factory: ApiFactory = Depends(get_api_factory),
    history: ExtractionHistoryRepository = Depends(get_history_repository),
    templates: ReportTemplateRepository = Depends(get_template_repository),
):
    """Run an extraction; failures come back as ``success: false``"""
    _check_template(templates, config)
    access_token = resolve_access_token(db, config.connection_id)
    api = api_factory(access_token)
    try:
        service = ConfigurableExtractService(api, history=history)
        return await service.extract(config)
    finally:
        await api.close()


@router.post("/preview", response_model=ExtractionResult)
async def preview_extraction(
    config: ExtractionConfig,
    db: Session = Depends(get_db),
    api_factory: ApiFactory = Depends(get_api_factory),
    templates: ReportTemplateRepository = Depends(get_template_repository),
):
    """First rows of an extraction, not recorded in history"""
    _check_template(templates, config)
    access_token = resolve_access_token(db, config.connection_id)
    api = api_factory(access_token)
    try:
        return await ConfigurableExtractService(api).preview(config)
    finally:
        await api.close()


@router.get("/history", response_model=ListResponse[ExtractionHistoryResponse])
def list_history(
    connection_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    history: ExtractionHistoryRepository = Depends(get_history_repository),
):
    """Recent extraction history entries"""
    entries = history.list_recent(connection_id=connection_id, limit=limit)
    return ListResponse(
        data=[ExtractionHistoryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.get("/accounts", response_model=ListResponse[AdAccountResponse])
async def list_ad_accounts(
    connection_id: Optional[str] = None,
    db: Session = Depends(get_db),
    api_factory: ApiFactory = Depends(get_api_factory),
):
    """Ad accounts the connection's token can read"""
    access_token = resolve_access_token(db, connection_id)
    api = api_factory(access_token)
    try:
        accounts = await api.fetch_ad_accounts()
    except UpstreamApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    finally:
        await api.close()

    return ListResponse(
        data=[AdAccountResponse.model_validate(a) for a in accounts],
        total=len(accounts),
    )


@router.get("/accounts/{account_id}/conversions", response_model=AvailableConversionsResponse)
async def list_account_conversions(
    account_id: str,
    connection_id: Optional[str] = None,
    db: Session = Depends(get_db),
    api_factory: ApiFactory = Depends(get_api_factory),
):
    """Action types seen in the last 7 days plus the account's custom conversions"""
    access_token = resolve_access_token(db, connection_id)
    api = api_factory(access_token)
    try:
        action_types = await api.detect_available_conversions(account_id)
        custom = await api.fetch_custom_conversions(account_id)
    except UpstreamApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    finally:
        await api.close()

    return AvailableConversionsResponse(
        account_id=account_id,
        action_types=action_types,
        custom_conversions=custom,
    )
