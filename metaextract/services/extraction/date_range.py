"""
Date range resolution

Turns a ``DateRangeConfig`` into concrete calendar dates. Weeks start on
Sunday; quarters are the 3-month blocks starting Jan/Apr/Jul/Oct.
"""
from datetime import date, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from metaextract.core.config import settings
from metaextract.core.exceptions import ConfigurationError
from metaextract.models.enums import DatePreset
from metaextract.schemas.extraction import DateRangeConfig, ResolvedDateRange

# last_N_days presets: window length in days, anchor inclusive
ROLLING_PRESETS = {
    DatePreset.LAST_7_DAYS: 7,
    DatePreset.LAST_14_DAYS: 14,
    DatePreset.LAST_30_DAYS: 30,
    DatePreset.LAST_90_DAYS: 90,
}


def _week_start(day: date) -> date:
    """Sunday on or before ``day``"""
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


def _quarter_start(day: date) -> date:
    return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)


def _preset_bounds(
    preset: DatePreset,
    today: date,
    end: date,
    lifetime_months: int,
) -> Tuple[date, date]:
    if preset == DatePreset.TODAY:
        return today, today

    if preset == DatePreset.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday

    if preset in ROLLING_PRESETS:
        return end - timedelta(days=ROLLING_PRESETS[preset] - 1), end

    if preset == DatePreset.THIS_WEEK:
        return _week_start(today), end

    if preset == DatePreset.LAST_WEEK:
        start = _week_start(today) - timedelta(days=7)
        return start, start + timedelta(days=6)

    if preset == DatePreset.THIS_MONTH:
        return today.replace(day=1), end

    if preset == DatePreset.LAST_MONTH:
        first_of_month = today.replace(day=1)
        return first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)

    if preset == DatePreset.THIS_QUARTER:
        return _quarter_start(today), end

    if preset == DatePreset.LAST_QUARTER:
        quarter_start = _quarter_start(today)
        return quarter_start - relativedelta(months=3), quarter_start - timedelta(days=1)

    if preset == DatePreset.THIS_YEAR:
        return date(today.year, 1, 1), end

    if preset == DatePreset.LAST_YEAR:
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    if preset == DatePreset.LIFETIME:
        return today - relativedelta(months=lifetime_months), end

    raise ConfigurationError(f"Unsupported date preset: {preset}")


def resolve_date_range(
    config: DateRangeConfig,
    today: Optional[date] = None,
    lifetime_months: Optional[int] = None,
) -> ResolvedDateRange:
    """
    Resolve a preset (or explicit bounds) to a start/end date pair.

    Args:
        config: Requested period
        today: Anchor date, defaults to the local calendar date
        lifetime_months: Lookback for the ``lifetime`` preset

    Raises:
        ConfigurationError: custom range without both bounds, or an empty window
    """
    today = today or date.today()
    if lifetime_months is None:
        lifetime_months = settings.EXTRACTION_LIFETIME_MONTHS

    if config.preset == DatePreset.CUSTOM:
        if config.start_date is None or config.end_date is None:
            raise ConfigurationError("Custom date range requires both a start date and an end date")
        start, end = config.start_date, config.end_date
        if start > end:
            raise ConfigurationError(
                f"Custom date range starts after it ends ({start.isoformat()} > {end.isoformat()})"
            )
        return ResolvedDateRange(start_date=start, end_date=end)

    end = today if config.include_today else today - timedelta(days=1)
    start, end = _preset_bounds(config.preset, today, end, lifetime_months)

    if start > end:
        raise ConfigurationError(
            f"Date preset '{config.preset.value}' has no complete days yet; include today or pick another period"
        )

    return ResolvedDateRange(start_date=start, end_date=end)
