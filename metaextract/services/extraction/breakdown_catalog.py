"""
Breakdown catalog

Segmentation dimensions accepted by the Insights ``breakdowns`` parameter.
Incompatibility is declared per breakdown but enforced in both directions
by the validator; one-directional declarations are reported at import so
the catalog can be fixed.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

HOURLY_ADVERTISER_TZ = "hourly_stats_aggregated_by_advertiser_time_zone"


@dataclass(frozen=True)
class BreakdownDefinition:
    """One segmentation dimension"""
    id: str
    display_name: str
    description: str
    api_field: str
    possible_values: Tuple[str, ...] = ()
    incompatible_with: Tuple[str, ...] = ()
    is_time_breakdown: bool = False


ALL_BREAKDOWNS: Tuple[BreakdownDefinition, ...] = (
    BreakdownDefinition(
        id="age",
        display_name="Age",
        description="Split by age bracket",
        api_field="age",
        possible_values=("13-17", "18-24", "25-34", "35-44", "45-54", "55-64", "65+"),
        incompatible_with=(HOURLY_ADVERTISER_TZ,),
    ),
    BreakdownDefinition(
        id="gender",
        display_name="Gender",
        description="Split by gender",
        api_field="gender",
        possible_values=("male", "female", "unknown"),
        incompatible_with=(HOURLY_ADVERTISER_TZ,),
    ),
    BreakdownDefinition(
        id="country",
        display_name="Country",
        description="Split by country",
        api_field="country",
    ),
    BreakdownDefinition(
        id="region",
        display_name="Region",
        description="Split by region / state",
        api_field="region",
    ),
    BreakdownDefinition(
        id="dma",
        display_name="DMA Region",
        description="Designated Market Area (US)",
        api_field="dma",
    ),
    BreakdownDefinition(
        id="device_platform",
        display_name="Device",
        description="Split by device (mobile, desktop)",
        api_field="device_platform",
        possible_values=("mobile", "desktop"),
    ),
    BreakdownDefinition(
        id="platform_position",
        display_name="Placement",
        description="Placement (Feed, Stories, Reels, ...)",
        api_field="platform_position",
        possible_values=("feed", "story", "an_classic", "video_feeds", "marketplace", "search", "reels"),
    ),
    BreakdownDefinition(
        id="publisher_platform",
        display_name="Platform",
        description="Publisher platform (Facebook, Instagram, Audience Network)",
        api_field="publisher_platform",
        possible_values=("facebook", "instagram", "audience_network", "messenger"),
    ),
    BreakdownDefinition(
        id="impression_device",
        display_name="Impression Device",
        description="Device the impression was served on",
        api_field="impression_device",
        possible_values=("desktop", "iphone", "ipad", "android_smartphone", "android_tablet", "other"),
    ),
    BreakdownDefinition(
        id="product_id",
        display_name="Product ID",
        description="Catalog product id (catalog campaigns)",
        api_field="product_id",
    ),
    BreakdownDefinition(
        id=HOURLY_ADVERTISER_TZ,
        display_name="Hour (Advertiser Time Zone)",
        description="Split by hour of day in the ad account time zone",
        api_field=HOURLY_ADVERTISER_TZ,
        is_time_breakdown=True,
    ),
)

_BREAKDOWNS_BY_ID: Dict[str, BreakdownDefinition] = {b.id: b for b in ALL_BREAKDOWNS}
if len(_BREAKDOWNS_BY_ID) != len(ALL_BREAKDOWNS):
    raise ValueError("Duplicate breakdown id in catalog")


def get_breakdown_by_id(breakdown_id: str) -> Optional[BreakdownDefinition]:
    """Look up a breakdown; None when the id is unknown"""
    return _BREAKDOWNS_BY_ID.get(breakdown_id)


def are_incompatible(first_id: str, second_id: str) -> bool:
    """True when either breakdown declares the other incompatible"""
    first = get_breakdown_by_id(first_id)
    second = get_breakdown_by_id(second_id)
    return bool(
        (first and second_id in first.incompatible_with)
        or (second and first_id in second.incompatible_with)
    )


def find_one_directional_incompatibilities(
    breakdowns: Tuple[BreakdownDefinition, ...] = ALL_BREAKDOWNS,
) -> List[Tuple[str, str]]:
    """Pairs (a, b) where a lists b as incompatible but b does not list a"""
    by_id = {b.id: b for b in breakdowns}
    pairs = []
    for breakdown in breakdowns:
        for other_id in breakdown.incompatible_with:
            other = by_id.get(other_id)
            if other is None or breakdown.id not in other.incompatible_with:
                pairs.append((breakdown.id, other_id))
    return pairs


for _declared, _missing in find_one_directional_incompatibilities():
    logger.warning(
        f"Breakdown catalog: '{_declared}' is incompatible with '{_missing}' "
        f"but '{_missing}' does not declare it back"
    )
