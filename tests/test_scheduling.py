"""
Tests for weekly batch creation, week copies, single entries and requests.
"""

from datetime import date

import pytest

from conftest import FakeScheduleStore, make_entry, make_template
from core.errors import (
    BatchAbortedError,
    InvalidTemplateError,
    InvalidTimeRangeError,
    InvalidWeekStartError,
    PastWeekError,
    ScheduleConflictError,
    ScheduleNotFoundError,
)
from services import scheduling

WEEK_START = "2024-06-09"  # Sunday of the `today` fixture's week


class TestWeekHelpers:
    def test_start_of_week_for_sunday_is_itself(self):
        assert scheduling.start_of_week(date(2024, 6, 9)) == date(2024, 6, 9)

    def test_start_of_week_for_saturday(self):
        assert scheduling.start_of_week(date(2024, 6, 15)) == date(2024, 6, 9)

    def test_week_dates(self):
        dates = scheduling.week_dates(date(2024, 6, 30))
        assert dates[0] == "2024-06-30"
        assert dates[-1] == "2024-07-06"
        assert len(dates) == 7

    def test_is_week_in_past(self, today):
        assert scheduling.is_week_in_past(date(2024, 6, 2), today) is True
        assert scheduling.is_week_in_past(date(2024, 6, 8), today) is True
        assert scheduling.is_week_in_past(date(2024, 6, 9), today) is False
        assert scheduling.is_week_in_past(date(2024, 6, 16), today) is False

    def test_expand_template_dates_follow_sunday_first_order(self):
        template = make_template({"sunday", "wednesday", "saturday"})
        candidates = scheduling.expand_template(5, template, date(2024, 6, 9))
        assert [c["date"] for c in candidates] == ["2024-06-09", "2024-06-12", "2024-06-15"]


class TestCreateWeeklySchedule:
    @pytest.mark.asyncio
    async def test_creates_one_entry_per_working_day(self, fake_store, weekday_template, today):
        result = await scheduling.create_weekly_schedule(
            fake_store, 5, weekday_template, WEEK_START, today=today
        )

        assert result.created_count == 5
        assert result.skipped_count == 0
        assert [e["date"] for e in fake_store.entries] == [
            "2024-06-10", "2024-06-11", "2024-06-12", "2024-06-13", "2024-06-14",
        ]
        assert all(e["start_time"] == "09:00" and e["end_time"] == "18:00" for e in fake_store.entries)

    @pytest.mark.asyncio
    async def test_fetches_all_seven_days_before_creating(self, fake_store, weekday_template, today):
        await scheduling.create_weekly_schedule(fake_store, 5, weekday_template, WEEK_START, today=today)

        names = fake_store.call_names()
        assert names[:7] == ["fetch_entries_for_date"] * 7
        assert names[7:] == ["create_entry"] * 5

    @pytest.mark.asyncio
    async def test_repeat_two_weeks_creates_ten(self, fake_store, weekday_template, today):
        result = await scheduling.create_weekly_schedule(
            fake_store, 5, weekday_template, WEEK_START, repeat_weeks=2, today=today
        )

        assert result.created_count == 10
        assert result.weeks == 2
        assert result.summary() == "Schedule created for 10 day(s) across 2 week(s)"
        assert sorted(e["date"] for e in fake_store.entries)[-1] == "2024-06-21"
        assert fake_store.call_names().count("fetch_entries_for_date") == 14

    @pytest.mark.asyncio
    async def test_all_days_conflicting_creates_nothing(self, weekday_template, today):
        existing = [
            make_entry(f"full-{d}", 5, d, "00:00", "23:59")
            for d in ["2024-06-10", "2024-06-11", "2024-06-12", "2024-06-13", "2024-06-14"]
        ]
        store = FakeScheduleStore(entries=existing)

        result = await scheduling.create_weekly_schedule(store, 5, weekday_template, WEEK_START, today=today)

        assert result.created_count == 0
        assert result.skipped_count == 5
        assert "create_entry" not in store.call_names()

    @pytest.mark.asyncio
    async def test_skips_only_conflicting_days(self, weekday_template, today):
        store = FakeScheduleStore(entries=[
            make_entry("monday-am", 5, "2024-06-10", "08:00", "10:00"),
            make_entry("tuesday-evening", 5, "2024-06-11", "18:00", "21:00"),  # back-to-back
            make_entry("other-staff", 7, "2024-06-12", "09:00", "18:00"),
        ])

        result = await scheduling.create_weekly_schedule(store, 5, weekday_template, WEEK_START, today=today)

        statuses = {o.candidate["date"]: o.status for o in result.outcomes}
        assert statuses == {
            "2024-06-10": "skipped",
            "2024-06-11": "created",
            "2024-06-12": "created",
            "2024-06-13": "created",
            "2024-06-14": "created",
        }
        assert result.created_count == 4

    @pytest.mark.asyncio
    async def test_past_week_rejected_without_store_calls(self, fake_store, weekday_template, today):
        with pytest.raises(PastWeekError):
            await scheduling.create_weekly_schedule(
                fake_store, 5, weekday_template, "2024-06-02", today=today
            )
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_invalid_time_rejected_without_store_calls(self, fake_store, today):
        template = make_template({"monday"}, start_time="18:00", end_time="09:00")
        with pytest.raises(InvalidTimeRangeError):
            await scheduling.create_weekly_schedule(fake_store, 5, template, WEEK_START, today=today)
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_unknown_day_name_rejected(self, fake_store, today):
        template = {"funday": {"is_working": True, "start_time": "09:00", "end_time": "10:00"}}
        with pytest.raises(InvalidTemplateError, match="funday"):
            await scheduling.create_weekly_schedule(fake_store, 5, template, WEEK_START, today=today)

    @pytest.mark.asyncio
    async def test_mis_cased_day_name_rejected_without_store_calls(self, fake_store, today):
        template = {"Monday": {"is_working": True, "start_time": "09:00", "end_time": "18:00"}}
        with pytest.raises(InvalidTemplateError, match="Monday"):
            await scheduling.create_weekly_schedule(fake_store, 5, template, WEEK_START, today=today)
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_non_sunday_week_start_rejected_without_store_calls(self, fake_store, today):
        # 2024-06-10 is a Monday; offsets from it would put "monday" on Tuesday
        with pytest.raises(InvalidWeekStartError, match="Monday"):
            await scheduling.create_weekly_schedule(
                fake_store, 5, make_template({"monday"}), "2024-06-10", today=today
            )
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_template_days_land_on_their_weekday(self, fake_store, today):
        await scheduling.create_weekly_schedule(
            fake_store, 5, make_template({"monday", "saturday"}), WEEK_START, repeat_weeks=2, today=today
        )
        assert [scheduling.day_label(e["date"]) for e in fake_store.entries] == [
            "Monday", "Saturday", "Monday", "Saturday",
        ]

    @pytest.mark.asyncio
    async def test_notes_applied_to_every_entry(self, fake_store, weekday_template, today):
        await scheduling.create_weekly_schedule(
            fake_store, 5, weekday_template, WEEK_START, notes="  front desk  ", today=today
        )
        assert {e["notes"] for e in fake_store.entries} == {"front desk"}

    @pytest.mark.asyncio
    async def test_store_failure_aborts_and_keeps_created(self, weekday_template, today):
        store = FakeScheduleStore(fail_on_create=3)

        with pytest.raises(BatchAbortedError) as exc_info:
            await scheduling.create_weekly_schedule(store, 5, weekday_template, WEEK_START, today=today)

        result = exc_info.value.result
        assert result.created_count == 2
        assert result.failed_count == 1
        assert result.outcomes[-1].error == "network down"
        assert len(store.entries) == 2
        assert store.call_names().count("create_entry") == 3


class TestFindWeekConflicts:
    @pytest.mark.asyncio
    async def test_lists_conflicting_day_labels(self, sample_entry, weekday_template, today):
        store = FakeScheduleStore(entries=[sample_entry])

        conflicts = await scheduling.find_week_conflicts(store, 5, weekday_template, WEEK_START, today=today)

        assert conflicts == ["Monday (09:00 - 18:00)"]
        assert "create_entry" not in store.call_names()

    @pytest.mark.asyncio
    async def test_no_conflicts(self, fake_store, weekday_template, today):
        assert await scheduling.find_week_conflicts(
            fake_store, 5, weekday_template, WEEK_START, today=today
        ) == []

    @pytest.mark.asyncio
    async def test_past_week(self, fake_store, weekday_template, today):
        with pytest.raises(PastWeekError):
            await scheduling.find_week_conflicts(fake_store, 5, weekday_template, "2024-05-26", today=today)

    @pytest.mark.asyncio
    async def test_non_sunday_week_start(self, fake_store, weekday_template, today):
        with pytest.raises(InvalidWeekStartError):
            await scheduling.find_week_conflicts(fake_store, 5, weekday_template, "2024-06-12", today=today)
        assert fake_store.calls == []


class TestCopyWeekToNext:
    @pytest.mark.asyncio
    async def test_copies_staff_entries_skipping_conflicts(self, today):
        store = FakeScheduleStore(entries=[
            make_entry("mon", 5, "2024-06-10", "09:00", "17:00", notes="opening"),
            make_entry("tue", 5, "2024-06-11", "09:00", "17:00"),
            make_entry("other", 7, "2024-06-10", "09:00", "17:00"),
            make_entry("next-tue", 5, "2024-06-18", "16:00", "20:00"),
        ])

        result = await scheduling.copy_week_to_next(store, 5, WEEK_START, today=today)

        assert result.created_count == 1
        assert result.skipped_count == 1
        copied = result.created[0]
        assert copied["date"] == "2024-06-17"
        assert copied["notes"] == "opening"
        assert copied["staff_id"] == 5

    @pytest.mark.asyncio
    async def test_empty_week_copies_nothing(self, fake_store, today):
        result = await scheduling.copy_week_to_next(fake_store, 5, WEEK_START, today=today)
        assert result.outcomes == []
        assert "create_entry" not in fake_store.call_names()

    @pytest.mark.asyncio
    async def test_target_week_in_past(self, today):
        store = FakeScheduleStore(entries=[make_entry("old", 5, "2024-05-27", "09:00", "17:00")])
        with pytest.raises(PastWeekError, match="past weeks"):
            await scheduling.copy_week_to_next(store, 5, "2024-05-26", today=today)


class TestSingleEntries:
    @pytest.mark.asyncio
    async def test_create_single_entry(self, fake_store):
        entry = await scheduling.create_single_entry(
            fake_store,
            {"staff_id": 5, "date": "2024-06-10", "start_time": "09:00", "end_time": "12:00"},
        )
        assert entry["id"].startswith("schedule-")
        assert entry["status"] == "scheduled"

    @pytest.mark.asyncio
    async def test_create_single_entry_conflict(self, sample_entry):
        store = FakeScheduleStore(entries=[sample_entry])
        with pytest.raises(ScheduleConflictError) as exc_info:
            await scheduling.create_single_entry(
                store,
                {"staff_id": 5, "date": "2024-06-10", "start_time": "12:00", "end_time": "14:00"},
            )
        assert [c["id"] for c in exc_info.value.conflicts] == ["schedule-existing"]
        assert "create_entry" not in store.call_names()

    @pytest.mark.asyncio
    async def test_update_ignores_the_entry_itself(self, sample_entry):
        store = FakeScheduleStore(entries=[sample_entry])
        updated = await scheduling.update_entry(
            store, "schedule-existing", {"start_time": "08:00", "end_time": "12:00"}
        )
        assert updated["start_time"] == "08:00"

    @pytest.mark.asyncio
    async def test_update_conflicting_with_another_entry(self, sample_entry):
        store = FakeScheduleStore(entries=[
            sample_entry,
            make_entry("afternoon", 5, "2024-06-10", "14:00", "18:00"),
        ])
        with pytest.raises(ScheduleConflictError):
            await scheduling.update_entry(store, "afternoon", {"start_time": "12:00"})

    @pytest.mark.asyncio
    async def test_update_notes_skips_conflict_check(self, sample_entry):
        store = FakeScheduleStore(entries=[sample_entry])
        await scheduling.update_entry(store, "schedule-existing", {"notes": "late start"})
        assert "fetch_entries_for_date" not in store.call_names()

    @pytest.mark.asyncio
    async def test_update_inverted_times_rejected(self, sample_entry):
        store = FakeScheduleStore(entries=[sample_entry])
        with pytest.raises(InvalidTimeRangeError):
            await scheduling.update_entry(store, "schedule-existing", {"end_time": "08:00"})

    @pytest.mark.asyncio
    async def test_update_missing(self, fake_store):
        with pytest.raises(ScheduleNotFoundError):
            await scheduling.update_entry(fake_store, "nope", {"notes": "x"})

    @pytest.mark.asyncio
    async def test_delete(self, sample_entry):
        store = FakeScheduleStore(entries=[sample_entry])
        await scheduling.delete_entry(store, "schedule-existing")
        assert store.entries == []

    @pytest.mark.asyncio
    async def test_delete_missing(self, fake_store):
        with pytest.raises(ScheduleNotFoundError):
            await scheduling.delete_entry(fake_store, "nope")


class TestScheduleRequests:
    @pytest.fixture
    def request_store(self):
        return FakeScheduleStore(requests=[{
            "id": "request-1",
            "staff_id": 5,
            "staff_name": "Dana",
            "date": "2024-06-10",
            "start_time": "10:00",
            "end_time": "16:00",
            "notes": "can't open",
            "status": "pending",
            "requested_at": "2024-06-01T00:00:00+00:00",
            "approved_at": None,
        }])

    @pytest.mark.asyncio
    async def test_approve_as_submitted(self, request_store):
        entry = await scheduling.approve_schedule_request(request_store, "request-1")

        assert (entry["start_time"], entry["end_time"]) == ("10:00", "16:00")
        assert entry["notes"] == "can't open"
        request = await request_store.get_request("request-1")
        assert request["status"] == "approved"
        assert request["approved_at"] is not None

    @pytest.mark.asyncio
    async def test_approve_with_modifications(self, request_store):
        entry = await scheduling.approve_schedule_request(
            request_store, "request-1", {"start_time": "11:00", "end_time": "15:00"}
        )

        assert (entry["start_time"], entry["end_time"]) == ("11:00", "15:00")
        assert entry["date"] == "2024-06-10"
        assert (await request_store.get_request("request-1"))["status"] == "modified"

    @pytest.mark.asyncio
    async def test_approve_conflicting_leaves_request_pending(self, request_store):
        request_store.entries.append(make_entry("busy", 5, "2024-06-10", "09:00", "11:00"))

        with pytest.raises(ScheduleConflictError):
            await scheduling.approve_schedule_request(request_store, "request-1")
        assert (await request_store.get_request("request-1"))["status"] == "pending"

    @pytest.mark.asyncio
    async def test_approve_missing(self, fake_store):
        with pytest.raises(ScheduleNotFoundError):
            await scheduling.approve_schedule_request(fake_store, "request-404")

    @pytest.mark.asyncio
    async def test_reject_with_reason(self, request_store):
        request = await scheduling.reject_schedule_request(request_store, "request-1", "short staffed")
        assert request["status"] == "rejected"
        assert request["notes"] == "short staffed"

    @pytest.mark.asyncio
    async def test_reject_missing(self, fake_store):
        with pytest.raises(ScheduleNotFoundError):
            await scheduling.reject_schedule_request(fake_store, "request-404")
