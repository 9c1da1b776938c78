"""
Field catalog

Static registry of every metric/dimension that can be extracted from the
Meta Insights API. Built once at import; nothing here is mutated afterwards.

``api_field`` follows the Graph API naming. Conversion-style metrics live
inside per-row arrays (``actions``, ``action_values``,
``cost_per_action_type``) and are written ``collection:action_type``; they
are parsed into a ``NestedAction`` accessor when the definition is built.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from metaextract.models.enums import FieldCategory, FieldDataType, ReportLevel


ALL_LEVELS: Tuple[ReportLevel, ...] = (ReportLevel.CAMPAIGN, ReportLevel.ADSET, ReportLevel.AD)


# ========================================
# Accessors
# ========================================

@dataclass(frozen=True)
class DirectField:
    """Value read straight off the row"""
    name: str


@dataclass(frozen=True)
class NestedAction:
    """Value found in ``row[collection]`` by ``action_type``"""
    collection: str
    action_type: str


FieldAccessor = Union[DirectField, NestedAction]


def parse_accessor(api_field: str) -> FieldAccessor:
    """Turn ``actions:purchase`` into NestedAction, anything else into DirectField"""
    collection, sep, action_type = api_field.partition(":")
    if sep and collection and action_type:
        return NestedAction(collection=collection, action_type=action_type)
    return DirectField(name=api_field)


# ========================================
# Definitions
# ========================================

@dataclass(frozen=True)
class FieldDefinition:
    """One extractable metric or dimension"""
    id: str
    display_name: str
    description: str
    api_field: str
    category: FieldCategory
    data_type: FieldDataType
    available_levels: Tuple[ReportLevel, ...] = ALL_LEVELS
    display_order: int = 999
    is_popular: bool = False
    accessor: FieldAccessor = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "accessor", parse_accessor(self.api_field))

    def is_available_at(self, level: ReportLevel) -> bool:
        return level in self.available_levels


_D = FieldCategory
_T = FieldDataType

DIMENSION_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("campaign_name", "Campaign Name", "Campaign name", "campaign_name",
                    _D.DIMENSION, _T.STRING, display_order=1, is_popular=True),
    FieldDefinition("campaign_id", "Campaign ID", "Unique campaign id", "campaign_id",
                    _D.DIMENSION, _T.STRING, display_order=2),
    FieldDefinition("adset_name", "Ad Set Name", "Ad set name", "adset_name",
                    _D.DIMENSION, _T.STRING, (ReportLevel.ADSET, ReportLevel.AD),
                    display_order=3, is_popular=True),
    FieldDefinition("adset_id", "Ad Set ID", "Unique ad set id", "adset_id",
                    _D.DIMENSION, _T.STRING, (ReportLevel.ADSET, ReportLevel.AD), display_order=4),
    FieldDefinition("ad_name", "Ad Name", "Ad name", "ad_name",
                    _D.DIMENSION, _T.STRING, (ReportLevel.AD,), display_order=5, is_popular=True),
    FieldDefinition("ad_id", "Ad ID", "Unique ad id", "ad_id",
                    _D.DIMENSION, _T.STRING, (ReportLevel.AD,), display_order=6),
    FieldDefinition("objective", "Objective", "Campaign objective", "objective",
                    _D.DIMENSION, _T.STRING, display_order=7),
    FieldDefinition("account_name", "Account Name", "Ad account name", "account_name",
                    _D.DIMENSION, _T.STRING, display_order=8),
    FieldDefinition("account_id", "Account ID", "Ad account id", "account_id",
                    _D.DIMENSION, _T.STRING, display_order=9),
)

DELIVERY_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("date_start", "Day", "Row date (daily granularity)", "date_start",
                    _D.DIMENSION, _T.DATE, display_order=0, is_popular=True),
    FieldDefinition("impressions", "Impressions", "Number of times the ads were on screen",
                    "impressions", _D.DELIVERY, _T.INTEGER, display_order=10, is_popular=True),
    FieldDefinition("reach", "Reach", "Number of people who saw the ads at least once",
                    "reach", _D.DELIVERY, _T.INTEGER, display_order=11, is_popular=True),
    FieldDefinition("frequency", "Frequency", "Average number of times each person saw the ad",
                    "frequency", _D.DELIVERY, _T.NUMBER, display_order=12, is_popular=True),
)

PERFORMANCE_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("clicks", "Clicks", "Total clicks on the ad", "clicks",
                    _D.PERFORMANCE, _T.INTEGER, display_order=20, is_popular=True),
    FieldDefinition("link_clicks", "Link Clicks", "Clicks on links to destinations on or off Facebook",
                    "inline_link_clicks", _D.PERFORMANCE, _T.INTEGER, display_order=21, is_popular=True),
    FieldDefinition("outbound_clicks", "Outbound Clicks", "Clicks that take people off Facebook",
                    "outbound_clicks", _D.PERFORMANCE, _T.INTEGER, display_order=22),
    FieldDefinition("ctr", "CTR (All)", "Percentage of impressions that produced a click", "ctr",
                    _D.PERFORMANCE, _T.PERCENTAGE, display_order=23, is_popular=True),
    FieldDefinition("link_ctr", "CTR (Link Click-Through Rate)", "Link click-through rate",
                    "inline_link_click_ctr", _D.PERFORMANCE, _T.PERCENTAGE, display_order=24,
                    is_popular=True),
    FieldDefinition("unique_clicks", "Unique Clicks", "Number of people who clicked",
                    "unique_clicks", _D.PERFORMANCE, _T.INTEGER, display_order=25),
    FieldDefinition("unique_ctr", "Unique CTR", "Unique click-through rate", "unique_ctr",
                    _D.PERFORMANCE, _T.PERCENTAGE, display_order=26),
)

COST_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("spend", "Amount Spent", "Total amount spent", "spend",
                    _D.COST, _T.CURRENCY, display_order=30, is_popular=True),
    FieldDefinition("cpc", "CPC (Cost per Link Click)", "Average cost per link click",
                    "cost_per_inline_link_click", _D.COST, _T.CURRENCY, display_order=31,
                    is_popular=True),
    FieldDefinition("cpc_all", "CPC (All)", "Average cost per click (all clicks)", "cpc",
                    _D.COST, _T.CURRENCY, display_order=32),
    FieldDefinition("cpm", "CPM (Cost per 1,000 Impressions)", "Cost per thousand impressions",
                    "cpm", _D.COST, _T.CURRENCY, display_order=33, is_popular=True),
    FieldDefinition("cpp", "CPP (Cost per 1,000 People Reached)", "Cost per thousand people reached",
                    "cpp", _D.COST, _T.CURRENCY, display_order=34),
    FieldDefinition("cost_per_result", "Cost per Result", "Average cost per result for the objective",
                    "cost_per_action_type", _D.COST, _T.CURRENCY, display_order=35, is_popular=True),
    FieldDefinition("cost_per_unique_click", "Cost per Unique Click", "Cost per unique click",
                    "cost_per_unique_click", _D.COST, _T.CURRENCY, display_order=36),
)

CONVERSION_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("results", "Results", "Results for the campaign objective", "actions",
                    _D.CONVERSION, _T.INTEGER, display_order=40, is_popular=True),
    FieldDefinition("purchases", "Purchases", "Number of purchases", "actions:purchase",
                    _D.CONVERSION, _T.INTEGER, display_order=41, is_popular=True),
    FieldDefinition("purchase_value", "Purchase Conversion Value", "Total purchase value",
                    "action_values:purchase", _D.CONVERSION, _T.CURRENCY, display_order=42,
                    is_popular=True),
    FieldDefinition("roas", "ROAS (Return on Ad Spend)", "Purchase return on ad spend",
                    "purchase_roas", _D.CONVERSION, _T.NUMBER, display_order=43, is_popular=True),
    FieldDefinition("leads", "Leads", "Number of leads", "actions:lead",
                    _D.CONVERSION, _T.INTEGER, display_order=44, is_popular=True),
    FieldDefinition("cost_per_lead", "Cost per Lead", "Average cost per lead",
                    "cost_per_action_type:lead", _D.CONVERSION, _T.CURRENCY, display_order=45),
    FieldDefinition("add_to_cart", "Add to Cart", "Add-to-cart events", "actions:add_to_cart",
                    _D.CONVERSION, _T.INTEGER, display_order=46),
    FieldDefinition("initiate_checkout", "Initiate Checkout", "Checkouts initiated",
                    "actions:initiate_checkout", _D.CONVERSION, _T.INTEGER, display_order=47),
    FieldDefinition("complete_registration", "Complete Registration", "Completed registrations",
                    "actions:complete_registration", _D.CONVERSION, _T.INTEGER, display_order=48),
    FieldDefinition("page_view", "Page Views", "Content views", "actions:view_content",
                    _D.CONVERSION, _T.INTEGER, display_order=49),
)

ENGAGEMENT_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("post_engagement", "Post Engagement", "Total post engagement",
                    "actions:post_engagement", _D.ENGAGEMENT, _T.INTEGER, display_order=50),
    FieldDefinition("post_reactions", "Post Reactions", "Reactions on the post",
                    "actions:post_reaction", _D.ENGAGEMENT, _T.INTEGER, display_order=51),
    FieldDefinition("post_comments", "Post Comments", "Comments on the post", "actions:comment",
                    _D.ENGAGEMENT, _T.INTEGER, display_order=52),
    FieldDefinition("post_shares", "Post Shares", "Shares of the post", "actions:post",
                    _D.ENGAGEMENT, _T.INTEGER, display_order=53),
    FieldDefinition("page_likes", "Page Likes", "Page likes", "actions:like",
                    _D.ENGAGEMENT, _T.INTEGER, display_order=54),
    FieldDefinition("link_click", "Link Clicks (Engagement)", "Link clicks counted as actions",
                    "actions:link_click", _D.ENGAGEMENT, _T.INTEGER, display_order=55),
)

VIDEO_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition("video_views", "Video Views", "Video plays of 3 seconds or more", "video_views",
                    _D.VIDEO, _T.INTEGER, display_order=60, is_popular=True),
    FieldDefinition("video_thruplay", "ThruPlays", "Plays to completion or at least 15 seconds",
                    "video_thruplay_watched_actions", _D.VIDEO, _T.INTEGER, display_order=61),
    FieldDefinition("video_p25", "Video 25% Watched", "Plays reaching 25%",
                    "video_p25_watched_actions", _D.VIDEO, _T.INTEGER, display_order=62),
    FieldDefinition("video_p50", "Video 50% Watched", "Plays reaching 50%",
                    "video_p50_watched_actions", _D.VIDEO, _T.INTEGER, display_order=63),
    FieldDefinition("video_p75", "Video 75% Watched", "Plays reaching 75%",
                    "video_p75_watched_actions", _D.VIDEO, _T.INTEGER, display_order=64),
    FieldDefinition("video_p100", "Video 100% Watched", "Plays reaching the end",
                    "video_p100_watched_actions", _D.VIDEO, _T.INTEGER, display_order=65),
    FieldDefinition("video_avg_time", "Average Video Watch Time", "Average watch time",
                    "video_avg_time_watched_actions", _D.VIDEO, _T.NUMBER, display_order=66),
    FieldDefinition("cost_per_thruplay", "Cost per ThruPlay", "Cost per ThruPlay",
                    "cost_per_thruplay", _D.VIDEO, _T.CURRENCY, display_order=67),
)


# ========================================
# Registry
# ========================================

def _build_registry(*groups: Tuple[FieldDefinition, ...]) -> Dict[str, FieldDefinition]:
    registry: Dict[str, FieldDefinition] = {}
    for group in groups:
        for definition in group:
            if definition.id in registry:
                raise ValueError(f"Duplicate field id in catalog: {definition.id}")
            if not definition.available_levels:
                raise ValueError(f"Field {definition.id} has no available levels")
            registry[definition.id] = definition
    return registry


_FIELDS_BY_ID = _build_registry(
    DIMENSION_FIELDS,
    DELIVERY_FIELDS,
    PERFORMANCE_FIELDS,
    COST_FIELDS,
    CONVERSION_FIELDS,
    ENGAGEMENT_FIELDS,
    VIDEO_FIELDS,
)

# sorted() is stable, so equal display orders keep catalog order
ALL_FIELDS: Tuple[FieldDefinition, ...] = tuple(
    sorted(_FIELDS_BY_ID.values(), key=lambda f: f.display_order)
)

FIELDS_BY_CATEGORY: Dict[FieldCategory, Tuple[FieldDefinition, ...]] = {
    category: tuple(f for f in ALL_FIELDS if f.category == category)
    for category in FieldCategory
}

CATEGORY_LABELS: Dict[FieldCategory, str] = {
    FieldCategory.DIMENSION: "Dimensions",
    FieldCategory.DELIVERY: "Delivery",
    FieldCategory.PERFORMANCE: "Performance",
    FieldCategory.COST: "Cost",
    FieldCategory.CONVERSION: "Conversions",
    FieldCategory.ENGAGEMENT: "Engagement",
    FieldCategory.VIDEO: "Video",
    FieldCategory.ATTRIBUTION: "Attribution",
}


def get_field_by_id(field_id: str) -> Optional[FieldDefinition]:
    """Look up a field; None when the id is unknown"""
    return _FIELDS_BY_ID.get(field_id)


def get_fields_for_level(level: ReportLevel) -> List[FieldDefinition]:
    """All fields available at ``level``, in display order"""
    return [f for f in ALL_FIELDS if f.is_available_at(level)]


def get_popular_fields() -> List[FieldDefinition]:
    return [f for f in ALL_FIELDS if f.is_popular]
