"""
Standard conversions, date presets and built-in report templates
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from metaextract.models.enums import DatePreset, ReportLevel


@dataclass(frozen=True)
class StandardConversion:
    id: str
    display_name: str
    action_type: str
    description: str
    category: str = "standard"


@dataclass(frozen=True)
class DatePresetOption:
    id: DatePreset
    label: str
    days: Optional[int] = None


@dataclass(frozen=True)
class ReportTemplate:
    name: str
    description: str
    level: ReportLevel
    fields: Tuple[str, ...]
    breakdowns: Tuple[str, ...] = ()


STANDARD_CONVERSIONS: Tuple[StandardConversion, ...] = (
    StandardConversion("purchase", "Purchase", "purchase", "Completed purchases"),
    StandardConversion("omni_purchase", "Omni Purchase", "omni_purchase", "Omnichannel purchases"),
    StandardConversion("lead", "Lead", "lead", "Leads generated"),
    StandardConversion("complete_registration", "Complete Registration", "complete_registration",
                       "Completed registrations"),
    StandardConversion("add_to_cart", "Add to Cart", "add_to_cart", "Add-to-cart events"),
    StandardConversion("initiate_checkout", "Initiate Checkout", "initiate_checkout",
                       "Checkouts initiated"),
    StandardConversion("view_content", "View Content", "view_content", "Content views"),
    StandardConversion("search", "Search", "search", "Searches"),
    StandardConversion("add_payment_info", "Add Payment Info", "add_payment_info",
                       "Payment info added"),
    StandardConversion("add_to_wishlist", "Add to Wishlist", "add_to_wishlist",
                       "Wishlist additions"),
    StandardConversion("contact", "Contact", "contact", "Contacts started"),
    StandardConversion("schedule", "Schedule", "schedule", "Appointments scheduled"),
    StandardConversion("start_trial", "Start Trial", "start_trial", "Trials started"),
    StandardConversion("subscribe", "Subscribe", "subscribe", "Subscriptions"),
)

DATE_PRESETS: Tuple[DatePresetOption, ...] = (
    DatePresetOption(DatePreset.TODAY, "Today", 0),
    DatePresetOption(DatePreset.YESTERDAY, "Yesterday", 1),
    DatePresetOption(DatePreset.LAST_7_DAYS, "Last 7 days", 7),
    DatePresetOption(DatePreset.LAST_14_DAYS, "Last 14 days", 14),
    DatePresetOption(DatePreset.LAST_30_DAYS, "Last 30 days", 30),
    DatePresetOption(DatePreset.LAST_90_DAYS, "Last 90 days", 90),
    DatePresetOption(DatePreset.THIS_WEEK, "This week"),
    DatePresetOption(DatePreset.LAST_WEEK, "Last week"),
    DatePresetOption(DatePreset.THIS_MONTH, "This month"),
    DatePresetOption(DatePreset.LAST_MONTH, "Last month"),
    DatePresetOption(DatePreset.THIS_QUARTER, "This quarter"),
    DatePresetOption(DatePreset.LAST_QUARTER, "Last quarter"),
    DatePresetOption(DatePreset.THIS_YEAR, "This year"),
    DatePresetOption(DatePreset.LAST_YEAR, "Last year"),
    DatePresetOption(DatePreset.LIFETIME, "Lifetime"),
    DatePresetOption(DatePreset.CUSTOM, "Custom"),
)

DEFAULT_TEMPLATES: Tuple[ReportTemplate, ...] = (
    ReportTemplate(
        name="Basic Performance",
        description="Core delivery and cost metrics",
        level=ReportLevel.CAMPAIGN,
        fields=("campaign_name", "impressions", "reach", "clicks", "ctr", "spend", "cpc"),
    ),
    ReportTemplate(
        name="Conversion Analysis",
        description="Results and return on spend",
        level=ReportLevel.CAMPAIGN,
        fields=("campaign_name", "results", "cost_per_result", "spend", "purchases",
                "purchase_value", "roas"),
    ),
    ReportTemplate(
        name="Video Metrics",
        description="Video ad completion funnel",
        level=ReportLevel.AD,
        fields=("ad_name", "impressions", "video_views", "video_thruplay", "video_p25",
                "video_p50", "video_p75", "video_p100", "spend"),
    ),
    ReportTemplate(
        name="Age and Gender",
        description="Demographic performance",
        level=ReportLevel.CAMPAIGN,
        fields=("campaign_name", "impressions", "reach", "clicks", "spend", "results"),
        breakdowns=("age", "gender"),
    ),
    ReportTemplate(
        name="Placement Performance",
        description="Compare Feed, Stories, Reels and other placements",
        level=ReportLevel.CAMPAIGN,
        fields=("campaign_name", "impressions", "clicks", "ctr", "spend", "cpc", "results"),
        breakdowns=("publisher_platform", "platform_position"),
    ),
    ReportTemplate(
        name="Full Daily Report",
        description="Daily rows with every core metric",
        level=ReportLevel.CAMPAIGN,
        fields=("date_start", "campaign_name", "impressions", "reach", "frequency", "clicks",
                "link_clicks", "ctr", "spend", "cpc", "cpm", "results", "cost_per_result"),
    ),
)


def get_template_by_name(name: str) -> Optional[ReportTemplate]:
    for template in DEFAULT_TEMPLATES:
        if template.name == name:
            return template
    return None
