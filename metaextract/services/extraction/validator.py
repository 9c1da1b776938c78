"""
Extraction configuration validation

Runs before any network call and stops at the first violation.
"""
from itertools import combinations
from typing import Optional, Sequence

from metaextract.core.config import settings
from metaextract.core.exceptions import ConfigurationError
from metaextract.models.enums import ReportLevel
from metaextract.schemas.extraction import ExtractionConfig
from metaextract.services.extraction.breakdown_catalog import are_incompatible, get_breakdown_by_id
from metaextract.services.extraction.field_catalog import get_field_by_id


def _find_duplicate(ids) -> Optional[str]:
    seen = set()
    for item in ids:
        if item in seen:
            return item
        seen.add(item)
    return None


def validate_config(config: ExtractionConfig, max_breakdowns: Optional[int] = None) -> None:
    """Raise ConfigurationError if ``config`` cannot be extracted"""
    if not config.connection_id:
        raise ConfigurationError("Connection id is required")

    if not config.account_id:
        raise ConfigurationError("Ad account id is required")

    validate_selection(config.level, config.selected_fields, config.breakdowns, max_breakdowns)


def validate_selection(
    level: ReportLevel,
    selected_fields: Sequence[str],
    breakdowns: Sequence[str],
    max_breakdowns: Optional[int] = None,
) -> None:
    """Field and breakdown checks shared by extractions and saved templates"""
    if max_breakdowns is None:
        max_breakdowns = settings.EXTRACTION_MAX_BREAKDOWNS

    if not selected_fields:
        raise ConfigurationError("Select at least one field to extract")

    duplicate = _find_duplicate(selected_fields)
    if duplicate:
        raise ConfigurationError(f"Field selected more than once: {duplicate}")

    for field_id in selected_fields:
        field = get_field_by_id(field_id)
        if field is None:
            raise ConfigurationError(f"Unknown field: {field_id}")

        if not field.is_available_at(level):
            raise ConfigurationError(
                f'Field "{field.display_name}" is not available at the "{level.value}" level'
            )

    for breakdown_id in breakdowns:
        if get_breakdown_by_id(breakdown_id) is None:
            raise ConfigurationError(f"Unknown breakdown: {breakdown_id}")

    if len(breakdowns) > max_breakdowns:
        raise ConfigurationError(
            f"At most {max_breakdowns} breakdowns can be combined ({len(breakdowns)} selected)"
        )

    duplicate = _find_duplicate(breakdowns)
    if duplicate:
        raise ConfigurationError(f"Breakdown selected more than once: {duplicate}")

    validate_breakdown_compatibility(breakdowns)


def validate_breakdown_compatibility(breakdown_ids) -> None:
    """Reject any pair declared incompatible by either side"""
    for first_id, second_id in combinations(breakdown_ids, 2):
        if are_incompatible(first_id, second_id):
            first = get_breakdown_by_id(first_id)
            second = get_breakdown_by_id(second_id)
            raise ConfigurationError(
                f'Incompatible breakdowns: "{first.display_name}" cannot be combined with "{second.display_name}"'
            )
