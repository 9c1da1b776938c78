"""
Insights query parameter builder

The Insights API returns conversion metrics as arrays under one umbrella
field per row (``actions``, ``action_values``, ...), so a nested field asks
for its umbrella collection and the projector picks the action type out.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from metaextract.models.enums import ReportLevel
from metaextract.schemas.extraction import ExtractionConfig
from metaextract.services.extraction.breakdown_catalog import get_breakdown_by_id
from metaextract.services.extraction.field_catalog import NestedAction, get_field_by_id

IDENTIFIER_FIELDS: Dict[ReportLevel, Tuple[str, ...]] = {
    ReportLevel.CAMPAIGN: ("campaign_id", "campaign_name"),
    ReportLevel.ADSET: ("campaign_id", "campaign_name", "adset_id", "adset_name"),
    ReportLevel.AD: ("campaign_id", "campaign_name", "adset_id", "adset_name", "ad_id", "ad_name"),
}

DATE_FIELDS: Tuple[str, ...] = ("date_start", "date_stop")


@dataclass(frozen=True)
class ApiParams:
    fields: Tuple[str, ...]
    breakdowns: Tuple[str, ...]


def build_api_params(config: ExtractionConfig) -> ApiParams:
    """Derive the ``fields``/``breakdowns`` query shape for a validated config"""
    # dict keeps insertion order and drops repeats
    fields: Dict[str, None] = dict.fromkeys(IDENTIFIER_FIELDS[config.level])

    for field_id in config.selected_fields:
        definition = get_field_by_id(field_id)
        if definition is None:
            continue
        accessor = definition.accessor
        if isinstance(accessor, NestedAction):
            fields.setdefault(accessor.collection)
        else:
            fields.setdefault(accessor.name)

    for date_field in DATE_FIELDS:
        fields.setdefault(date_field)

    breakdowns: List[str] = []
    for breakdown_id in config.breakdowns:
        definition = get_breakdown_by_id(breakdown_id)
        if definition is not None and definition.api_field not in breakdowns:
            breakdowns.append(definition.api_field)

    return ApiParams(fields=tuple(fields), breakdowns=tuple(breakdowns))
