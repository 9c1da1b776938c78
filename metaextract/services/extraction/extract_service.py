"""
Configurable Extraction Service
Validate -> build params -> resolve dates -> fetch -> project -> record history
"""
import logging
import time
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from metaextract.core.config import settings
from metaextract.core.exceptions import ExtractionError, PersistenceWarning
from metaextract.models.enums import ExtractionPhase, ExtractionStatus
from metaextract.schemas.extraction import (
    ExtractionConfig,
    ExtractionProgress,
    ExtractionResult,
    ResolvedDateRange,
    ResultDateRange,
)
from metaextract.services.extraction.api_params import build_api_params
from metaextract.services.extraction.date_range import resolve_date_range
from metaextract.services.extraction.history import ExtractionHistoryRepository
from metaextract.services.extraction.projector import build_column_meta, project_rows
from metaextract.services.extraction.validator import validate_config
from metaextract.services.facebook.fb_api import FacebookAPI

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExtractionProgress], None]


class ConfigurableExtractService:
    """
    Runs one configurable extraction against the Insights API.

    Every failure ends up in ``ExtractionResult(success=False, error=...)``
    and an ``error`` progress event; ``extract`` never raises.
    """

    def __init__(
        self,
        api: FacebookAPI,
        history: Optional[ExtractionHistoryRepository] = None,
        on_progress: Optional[ProgressCallback] = None,
        clock: Callable[[], float] = time.monotonic,
        today: Optional[date] = None,
    ):
        self.api = api
        self.history = history
        self.on_progress = on_progress
        self.clock = clock
        self.today = today

    def update_progress(self, phase: ExtractionPhase, current: int, total: int, message: str) -> None:
        percentage = round(current / total * 100) if total > 0 else 0
        progress = ExtractionProgress(
            phase=phase,
            current=current,
            total=total,
            message=message,
            percentage=percentage,
        )
        if self.on_progress:
            self.on_progress(progress)
        logger.info(f"Extraction [{phase.value}] {message} ({current}/{total}, {percentage}%)")

    async def extract(self, config: ExtractionConfig) -> ExtractionResult:
        """Run a full extraction and record it in history"""
        return await self._run(config, max_pages=None, save_history=True)

    async def preview(self, config: ExtractionConfig) -> ExtractionResult:
        """First page only, capped at the preview row count, no history entry"""
        preview_config = config.model_copy(update={"limit": settings.EXTRACTION_PREVIEW_ROWS})
        result = await self._run(preview_config, max_pages=1, save_history=False)
        if result.success:
            result.data = result.data[: settings.EXTRACTION_PREVIEW_ROWS]
            result.total_records = len(result.data)
        return result

    async def _run(
        self,
        config: ExtractionConfig,
        max_pages: Optional[int],
        save_history: bool,
    ) -> ExtractionResult:
        started = self.clock()
        started_at = datetime.now(timezone.utc)
        date_range: Optional[ResolvedDateRange] = None

        try:
            self.update_progress(ExtractionPhase.VALIDATING, 0, 4, "Validating configuration...")
            validate_config(config)

            self.update_progress(ExtractionPhase.VALIDATING, 1, 4, "Building request parameters...")
            api_params = build_api_params(config)

            self.update_progress(ExtractionPhase.VALIDATING, 2, 4, "Resolving date range...")
            date_range = resolve_date_range(config.date_range, today=self.today)

            self.update_progress(ExtractionPhase.FETCHING_DATA, 0, 1, "Fetching data from Meta API...")
            raw_rows = await self.api.fetch_insights(
                config.account_id,
                config.level,
                api_params.fields,
                api_params.breakdowns,
                date_range,
                limit=config.limit,
                on_progress=self.update_progress,
                max_pages=max_pages,
            )

            self.update_progress(ExtractionPhase.PROCESSING, 0, 1, "Processing data...")
            records = project_rows(raw_rows, config)
            columns = build_column_meta(config.selected_fields)

            warnings: List[str] = []
            if save_history and self.history is not None:
                self.update_progress(ExtractionPhase.SAVING, 0, 1, "Saving extraction history...")
                warning = self._save_history(
                    config, ExtractionStatus.COMPLETED, started, started_at,
                    records_count=len(records), date_range=date_range,
                )
                if warning:
                    warnings.append(warning)

            self.update_progress(ExtractionPhase.COMPLETE, 1, 1, "Extraction complete!")

            return ExtractionResult(
                success=True,
                data=records,
                columns=columns,
                total_records=len(records),
                date_range=ResultDateRange(
                    start=date_range.start_date.isoformat(),
                    end=date_range.end_date.isoformat(),
                ),
                duration_ms=self._elapsed_ms(started),
                warnings=warnings,
            )

        except ExtractionError as e:
            return self._failure(config, e.message, started, started_at, date_range, save_history)

        except Exception as e:
            logger.error(f"Unexpected extraction failure: {e}", exc_info=True)
            return self._failure(config, str(e), started, started_at, date_range, save_history)

    def _failure(
        self,
        config: ExtractionConfig,
        message: str,
        started: float,
        started_at: datetime,
        date_range: Optional[ResolvedDateRange],
        save_history: bool,
    ) -> ExtractionResult:
        self.update_progress(ExtractionPhase.ERROR, 0, 0, f"Error: {message}")
        logger.error(
            f"Configurable extraction failed: {message} "
            f"(level={config.level.value}, fields={len(config.selected_fields)}, "
            f"breakdowns={len(config.breakdowns)})"
        )

        if save_history:
            self._save_history(
                config, ExtractionStatus.FAILED, started, started_at,
                date_range=date_range, error_message=message,
            )

        return ExtractionResult(
            success=False,
            data=[],
            columns=[],
            total_records=0,
            duration_ms=self._elapsed_ms(started),
            error=message,
        )

    def _save_history(
        self,
        config: ExtractionConfig,
        status: ExtractionStatus,
        started: float,
        started_at: datetime,
        records_count: int = 0,
        date_range: Optional[ResolvedDateRange] = None,
        error_message: Optional[str] = None,
    ) -> Optional[str]:
        """Write a history entry; returns a warning message instead of raising"""
        if self.history is None:
            return None
        try:
            self.history.record(
                config,
                status,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
                duration_ms=self._elapsed_ms(started),
                records_count=records_count,
                date_range=date_range,
                error_message=error_message,
            )
        except PersistenceWarning as e:
            logger.warning(f"Extraction history not saved: {e.message}")
            return e.message
        except Exception as e:
            # Any sink failure is a persistence failure; it never fails the extraction
            message = f"Could not save extraction history: {e}"
            logger.warning(f"Extraction history not saved: {message}", exc_info=True)
            return message
        return None

    def _elapsed_ms(self, started: float) -> int:
        return int((self.clock() - started) * 1000)
