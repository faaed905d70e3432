"""Tests for slot availability read from the database."""

from datetime import date, datetime, time, timedelta

import pytest

from agenda.errors import InvalidArgument, NotFound
from agenda.models import Appointments
from agenda.services.availability_blocks import create_block
from agenda.services.provider_settings import upsert_settings
from agenda.services.slots.availability import (
    get_slots,
    get_slots_calendar,
    get_slots_with_status,
    provider_today,
)
from agenda.services.slots.intervals import UTC, local_datetime, to_db
from tests.conftest import CLIENT_ID, PROVIDER_ID, PROVIDER_TZ

MONDAY = date(2026, 10, 19)
WEEK_BEFORE = datetime(2026, 10, 12, 12, 0, tzinfo=UTC)


def at(hour, minute=0, day=MONDAY):
    return local_datetime(day, time(hour, minute), PROVIDER_TZ)


@pytest.fixture
def monday_morning(provider, add_rule):
    return add_rule(1, "09:00", "12:00")


@pytest.fixture
def add_appointment(db):
    def _add(start, minutes=50, status="scheduled"):
        obj = Appointments(
            client_id=CLIENT_ID,
            provider_id=PROVIDER_ID,
            session_type="video",
            status=status,
            start_at=to_db(start),
            end_at=to_db(start + timedelta(minutes=minutes)),
        )
        db.add(obj)
        db.commit()
        return obj
    return _add


class TestGetSlots:
    """GetSlots reads rules, blocks and bookings fresh on every call."""

    def test_monday_morning(self, db, monday_morning, config):
        slots = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert len(slots) == 14
        assert slots[0].start == at(9, 0)
        assert slots[-1].start == at(11, 10)

    def test_booked_appointment_is_excluded(self, db, monday_morning, add_appointment, config):
        add_appointment(at(10, 0))
        slots = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert [s.start for s in slots] == [at(9, 0), at(9, 10), at(10, 50), at(11, 0), at(11, 10)]

    def test_rescheduled_appointment_blocks(self, db, monday_morning, add_appointment, config):
        add_appointment(at(10, 0), status="rescheduled")
        slots = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert len(slots) == 5

    @pytest.mark.parametrize("status", ["cancelled", "completed"])
    def test_finished_appointments_do_not_block(self, db, monday_morning, add_appointment, config, status):
        add_appointment(at(10, 0), status=status)
        slots = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert len(slots) == 14

    def test_block_is_excluded(self, db, monday_morning, config):
        create_block(db, PROVIDER_ID, at(10, 0), at(10, 30))
        slots = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert at(9, 10) in [s.start for s in slots]
        assert at(9, 20) not in [s.start for s in slots]
        assert len(slots) == 7

    def test_vacation_block_empties_the_day(self, db, monday_morning, config):
        create_block(db, PROVIDER_ID, at(0, 0, day=MONDAY - timedelta(days=3)), at(0, 0, day=MONDAY + timedelta(days=5)))
        assert get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config) == []

    def test_chat_has_no_rules(self, db, monday_morning, config):
        assert get_slots(db, PROVIDER_ID, MONDAY, "chat", now=WEEK_BEFORE, config=config) == []

    def test_other_provider_appointments_ignored(self, db, monday_morning, config):
        upsert_settings(db, 2, {"timezone": PROVIDER_TZ})
        db.add(Appointments(
            client_id=CLIENT_ID, provider_id=2, session_type="video",
            start_at=to_db(at(10, 0)), end_at=to_db(at(10, 50)),
        ))
        db.commit()

        assert len(get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)) == 14

    def test_unknown_provider(self, db, config):
        with pytest.raises(NotFound):
            get_slots(db, 999, MONDAY, "video", now=WEEK_BEFORE, config=config)

    def test_unknown_session_type(self, db, monday_morning, config):
        with pytest.raises(InvalidArgument):
            get_slots(db, PROVIDER_ID, MONDAY, "phone", now=WEEK_BEFORE, config=config)

    def test_repeated_calls_agree(self, db, monday_morning, config):
        first = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        second = get_slots(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        assert first == second


class TestSlotStatusView:
    """Provider agenda with every candidate labelled."""

    def test_labels(self, db, monday_morning, add_appointment, config):
        add_appointment(at(9, 0))
        create_block(db, PROVIDER_ID, at(11, 0), at(12, 0))

        slots = get_slots_with_status(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config)
        status = {s.start: s.status for s in slots}

        assert len(slots) == 14
        assert status[at(9, 0)] == "booked"
        assert status[at(9, 50)] == "available"
        assert status[at(10, 20)] == "blocked"

    def test_no_rules(self, db, provider, config):
        assert get_slots_with_status(db, PROVIDER_ID, MONDAY, "video", now=WEEK_BEFORE, config=config) == []


class TestCalendar:
    """Open slot counts per day."""

    def test_counts_per_day(self, db, monday_morning, add_appointment, config):
        add_appointment(at(10, 0))
        days = get_slots_calendar(
            db, PROVIDER_ID, "video", MONDAY, MONDAY + timedelta(days=7),
            now=WEEK_BEFORE, config=config,
        )

        counts = dict(days)
        assert len(days) == 8
        assert counts[MONDAY] == 5
        assert counts[MONDAY + timedelta(days=1)] == 0
        assert counts[MONDAY + timedelta(days=7)] == 14

    def test_single_day(self, db, monday_morning, config):
        days = get_slots_calendar(db, PROVIDER_ID, "video", MONDAY, MONDAY, now=WEEK_BEFORE, config=config)
        assert days == [(MONDAY, 14)]


class TestProviderToday:
    """Provider-local calendar date."""

    def test_late_evening_utc_is_still_today_locally(self, db, provider):
        # 01:30 UTC on Tuesday is 22:30 on Monday in São Paulo
        now = datetime(2026, 10, 20, 1, 30, tzinfo=UTC)
        assert provider_today(db, PROVIDER_ID, now=now) == MONDAY
