"""Time entry aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from chronolog.db.models import TimeEntry
from chronolog.tracking.time_service import (
    TimeEntryIntegrityError,
    aggregate_time_entries,
    get_activity_stats,
    get_last_tracked,
)
from tests.conftest import add_entry

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def _entry(start_offset: float, length: float | None, entry_id: int = 1) -> TimeEntry:
    start = T0 + timedelta(seconds=start_offset)
    end = start + timedelta(seconds=length) if length is not None else None
    return TimeEntry(id=entry_id, user_id=1, activity_id=1, start_time=start, end_time=end)


class TestAggregateTimeEntries:
    def test_empty(self):
        stats = aggregate_time_entries([])
        assert stats.total_seconds == 0
        assert stats.entry_count == 0

    def test_sums_completed_entries(self):
        stats = aggregate_time_entries([_entry(0, 1500), _entry(3600, 900)])
        assert stats.total_seconds == 2400
        assert stats.entry_count == 2

    def test_running_entries_not_counted(self):
        stats = aggregate_time_entries([_entry(0, 600), _entry(1000, None)])
        assert stats.total_seconds == 600
        assert stats.entry_count == 1

    def test_fractional_seconds_truncate(self):
        stats = aggregate_time_entries([_entry(0, 59.9)])
        assert stats.total_seconds == 59

    def test_naive_and_aware_mix(self):
        naive = TimeEntry(id=1, start_time=T0.replace(tzinfo=None), end_time=(T0 + timedelta(minutes=5)))
        assert aggregate_time_entries([naive]).total_seconds == 300

    def test_end_before_start_raises(self):
        with pytest.raises(TimeEntryIntegrityError) as exc_info:
            aggregate_time_entries([_entry(0, 600), _entry(0, -5, entry_id=7)])
        assert exc_info.value.entry_id == 7


class TestActivityStats:
    @pytest.mark.asyncio
    async def test_stats_and_last_tracked(self, db_session, activity):
        first = await add_entry(db_session, activity, 600, start=T0)
        second = await add_entry(db_session, activity, 300, start=T0 + timedelta(hours=2))
        await add_entry(db_session, activity, None)

        stats = await get_activity_stats(db_session, activity.id)
        assert stats.total_seconds == 900
        assert stats.entry_count == 2

        last = await get_last_tracked(db_session, activity.id)
        assert last == second.end_time
        assert last > first.end_time

    @pytest.mark.asyncio
    async def test_no_entries(self, db_session, activity):
        assert (await get_activity_stats(db_session, activity.id)).total_seconds == 0
        assert await get_last_tracked(db_session, activity.id) is None
