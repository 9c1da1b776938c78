"""
Tests for the extraction history repository.
"""
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from metaextract.core.exceptions import PersistenceWarning
from metaextract.models.enums import ExtractionStatus, ReportLevel
from metaextract.schemas.extraction import ExtractionConfig, ResolvedDateRange
from metaextract.services.extraction.history import ExtractionHistoryRepository

STARTED = datetime(2025, 3, 15, 9, 0, tzinfo=timezone.utc)


def make_config(connection_id="conn-1") -> ExtractionConfig:
    return ExtractionConfig(
        connection_id=connection_id,
        account_id="act_123",
        level=ReportLevel.ADSET,
        selected_fields=("adset_name", "spend"),
        conversions=("purchase",),
    )


def record(history, config, started_at=STARTED, status=ExtractionStatus.COMPLETED, **kwargs):
    return history.record(
        config,
        status,
        started_at=started_at,
        completed_at=started_at + timedelta(seconds=2),
        duration_ms=2000,
        **kwargs,
    )


class TestExtractionHistoryRepository:
    """Writing and listing history entries."""

    def test_record_returns_id(self, history):
        entry_id = record(
            history,
            make_config(),
            records_count=7,
            date_range=ResolvedDateRange(start_date=date(2025, 3, 1), end_date=date(2025, 3, 14)),
        )

        entries = history.list_recent()
        assert [e.id for e in entries] == [entry_id]
        entry = entries[0]
        assert entry.level == ReportLevel.ADSET
        assert entry.conversions_included == ["purchase"]
        assert entry.records_count == 7
        assert entry.date_start == date(2025, 3, 1)
        assert entry.date_end == date(2025, 3, 14)
        assert entry.duration_ms == 2000

    def test_failed_entry(self, history):
        record(history, make_config(), status=ExtractionStatus.FAILED, error_message="Meta API Error: x")

        entry = history.list_recent()[0]
        assert entry.status == ExtractionStatus.FAILED
        assert entry.error_message == "Meta API Error: x"
        assert entry.date_start is None

    def test_most_recent_first(self, history):
        first = record(history, make_config(), started_at=STARTED)
        second = record(history, make_config(), started_at=STARTED + timedelta(hours=1))

        assert [e.id for e in history.list_recent()] == [second, first]
        assert [e.id for e in history.list_recent(limit=1)] == [second]

    def test_filter_by_connection(self, history):
        record(history, make_config("conn-1"))
        other = record(history, make_config("conn-2"))

        assert [e.id for e in history.list_recent(connection_id="conn-2")] == [other]

    def test_write_failure_raises_persistence_warning(self):
        class BrokenSession:
            def add(self, entry):
                raise OperationalError("INSERT", {}, Exception("database is locked"))

            def rollback(self):
                pass

            def close(self):
                pass

        repository = ExtractionHistoryRepository(session_factory=BrokenSession)

        with pytest.raises(PersistenceWarning, match="Could not save extraction history"):
            record(repository, make_config())
