"""
Command-line extraction runner

Usage:
    python -m metaextract.cli extract --account act_123 --fields campaign_name,impressions,spend
    python -m metaextract.cli extract --account act_123 --fields ad_name,spend --level ad \\
        --preset custom --start 2025-01-01 --end 2025-01-31 --output january.json
    python -m metaextract.cli init-db
"""
import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import List, Optional

from metaextract.core.config import settings
from metaextract.core.database import Base, engine
from metaextract.main import setup_logging
from metaextract.models import ExtractionHistory, OAuthToken, SavedReportTemplate  # noqa: F401  (register tables)
from metaextract.models.enums import DatePreset, ReportLevel
from metaextract.schemas.extraction import DateRangeConfig, ExtractionConfig, ExtractionResult
from metaextract.services.extraction.extract_service import ConfigurableExtractService
from metaextract.services.extraction.history import ExtractionHistoryRepository
from metaextract.services.facebook.fb_api import FacebookAPI

logger = logging.getLogger(__name__)


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Meta Ads configurable extraction")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Run an extraction and write the result as JSON")
    extract.add_argument("--account", required=True, help="Ad account id (act_xxx)")
    extract.add_argument("--connection", default="cli", help="Connection id recorded in history")
    extract.add_argument("--fields", required=True, type=_csv, help="Comma-separated field ids")
    extract.add_argument("--breakdowns", default=[], type=_csv, help="Comma-separated breakdown ids")
    extract.add_argument("--level", default=ReportLevel.CAMPAIGN.value,
                         choices=[level.value for level in ReportLevel])
    extract.add_argument("--preset", default=DatePreset.LAST_30_DAYS.value,
                         choices=[preset.value for preset in DatePreset])
    extract.add_argument("--start", type=date.fromisoformat, help="Start date (YYYY-MM-DD), custom preset")
    extract.add_argument("--end", type=date.fromisoformat, help="End date (YYYY-MM-DD), custom preset")
    extract.add_argument("--exclude-today", action="store_true", help="End the window yesterday")
    extract.add_argument("--limit", type=_non_negative_int, default=None, help="Page size (0 = no limit)")
    extract.add_argument("--token", default=None, help="Access token (default: FACEBOOK_ACCESS_TOKEN)")
    extract.add_argument("--output", default=None, help="Write result JSON here instead of stdout")
    extract.add_argument("--no-history", action="store_true", help="Do not record extraction history")

    subparsers.add_parser("init-db", help="Create database tables")
    return parser


def config_from_args(args: argparse.Namespace) -> ExtractionConfig:
    return ExtractionConfig(
        connection_id=args.connection,
        account_id=args.account,
        level=ReportLevel(args.level),
        selected_fields=tuple(args.fields),
        breakdowns=tuple(args.breakdowns),
        date_range=DateRangeConfig(
            preset=DatePreset(args.preset),
            start_date=args.start,
            end_date=args.end,
            include_today=not args.exclude_today,
        ),
        limit=args.limit,
    )


async def run_extraction(
    config: ExtractionConfig,
    api: FacebookAPI,
    history: Optional[ExtractionHistoryRepository] = None,
) -> ExtractionResult:
    try:
        service = ConfigurableExtractService(api, history=history)
        return await service.extract(config)
    finally:
        await api.close()


def create_tables():
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
    logger.info("All tables created successfully")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "init-db":
        create_tables()
        return 0

    token = args.token or settings.FACEBOOK_ACCESS_TOKEN
    if not token:
        logger.error("No access token: pass --token or set FACEBOOK_ACCESS_TOKEN")
        return 2

    config = config_from_args(args)
    history = None if args.no_history else ExtractionHistoryRepository()
    result = asyncio.run(run_extraction(config, FacebookAPI(access_token=token), history))

    payload = result.model_dump_json(by_alias=True, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info(f"Wrote {result.total_records} records to {args.output}")
    else:
        print(payload)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
