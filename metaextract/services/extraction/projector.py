"""
Result projection

Maps raw Insights rows to flat records keyed by field id.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from metaextract.schemas.extraction import ExtractedRecord, ExtractionConfig, ResultColumnMeta
from metaextract.services.extraction.breakdown_catalog import get_breakdown_by_id
from metaextract.services.extraction.field_catalog import NestedAction, get_field_by_id

DATE_KEY = "date_start"


def extract_action_value(actions: Any, action_type: str) -> Optional[float]:
    """Numeric value of the ``action_type`` entry in an actions array, else None"""
    if not isinstance(actions, list):
        return None

    for action in actions:
        if not isinstance(action, dict) or action.get("action_type") != action_type:
            continue
        value = action.get("value")
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    return None


def project_row(row: Dict[str, Any], config: ExtractionConfig) -> ExtractedRecord:
    record: ExtractedRecord = {}

    for field_id in config.selected_fields:
        definition = get_field_by_id(field_id)
        if definition is None:
            continue
        accessor = definition.accessor
        if isinstance(accessor, NestedAction):
            record[field_id] = extract_action_value(row.get(accessor.collection), accessor.action_type)
        else:
            record[field_id] = row.get(accessor.name)

    for breakdown_id in config.breakdowns:
        definition = get_breakdown_by_id(breakdown_id)
        if definition is not None and definition.api_field in row:
            record[breakdown_id] = row[definition.api_field]

    if row.get(DATE_KEY):
        record[DATE_KEY] = row[DATE_KEY]

    return record


def project_rows(rows: Iterable[Dict[str, Any]], config: ExtractionConfig) -> List[ExtractedRecord]:
    """Project every raw row, keeping upstream order"""
    return [project_row(row, config) for row in rows]


def build_column_meta(selected_fields: Sequence[str]) -> List[ResultColumnMeta]:
    """Column descriptors in selection order; unknown ids are skipped"""
    columns = []
    for field_id in selected_fields:
        definition = get_field_by_id(field_id)
        if definition is None:
            continue
        columns.append(
            ResultColumnMeta(
                field=field_id,
                display_name=definition.display_name,
                data_type=definition.data_type,
                category=definition.category,
            )
        )
    return columns
