"""
Extraction history persistence
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from metaextract.core.database import SessionLocal
from metaextract.core.exceptions import PersistenceWarning
from metaextract.models.enums import ExtractionStatus
from metaextract.models.extraction_history import ExtractionHistory
from metaextract.schemas.extraction import ExtractionConfig, ResolvedDateRange

logger = logging.getLogger(__name__)


class ExtractionHistoryRepository:
    """Writes and reads extraction_history rows, one short session per call"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def record(
        self,
        config: ExtractionConfig,
        status: ExtractionStatus,
        started_at: datetime,
        completed_at: datetime,
        duration_ms: int,
        records_count: int = 0,
        date_range: Optional[ResolvedDateRange] = None,
        error_message: Optional[str] = None,
    ) -> int:
        """
        Append one history entry.

        Returns:
            id of the new row

        Raises:
            PersistenceWarning: the row could not be written
        """
        db = self.session_factory()
        try:
            entry = ExtractionHistory(
                connection_id=config.connection_id or "",
                account_id=config.account_id,
                template_id=config.template_id,
                level=config.level,
                fields_extracted=list(config.selected_fields),
                breakdowns_used=list(config.breakdowns),
                conversions_included=list(config.conversions),
                date_start=date_range.start_date if date_range else None,
                date_end=date_range.end_date if date_range else None,
                records_count=records_count,
                status=status,
                error_message=error_message,
                started_at=started_at,
                completed_at=completed_at,
                duration_ms=duration_ms,
            )
            db.add(entry)
            db.commit()
            db.refresh(entry)
            return entry.id
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceWarning(f"Could not save extraction history: {e}") from e
        finally:
            db.close()

    def list_recent(
        self,
        connection_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[ExtractionHistory]:
        """Most recent entries first"""
        db = self.session_factory()
        try:
            query = db.query(ExtractionHistory)
            if connection_id:
                query = query.filter(ExtractionHistory.connection_id == connection_id)
            return (
                query.order_by(ExtractionHistory.started_at.desc(), ExtractionHistory.id.desc())
                .limit(limit)
                .all()
            )
        finally:
            db.close()
