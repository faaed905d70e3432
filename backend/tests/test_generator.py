"""Tests for the pure slot generator."""

from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytest

from agenda.services.slots.config import BookingConfig
from agenda.services.slots.generator import (
    SLOT_AVAILABLE,
    SLOT_BLOCKED,
    SLOT_BOOKED,
    SLOT_PAST,
    generate_slots_for_day,
    generate_slots_with_status,
    is_candidate,
)
from agenda.services.slots.intervals import UTC, local_datetime

TZ = "America/Sao_Paulo"
MONDAY = date(2026, 10, 19)
# Sunday 18:00 in São Paulo, a week before MONDAY
SUNDAY_WEEK_BEFORE = datetime(2026, 10, 11, 21, 0, tzinfo=UTC)
# Sunday 18:00 in São Paulo, the evening before MONDAY
SUNDAY_EVENING = datetime(2026, 10, 18, 21, 0, tzinfo=UTC)

CONFIG = BookingConfig(candidate_step_minutes=10, min_schedule_lead_hours=24)


def at(hour, minute=0, day=MONDAY):
    return local_datetime(day, time(hour, minute), TZ)


def rule(start_time, end_time, weekday=1, session_type="video", is_active=True):
    return SimpleNamespace(
        weekday=weekday,
        start_time=start_time,
        end_time=end_time,
        session_type=session_type,
        is_active=is_active,
    )


def generate(rules, blocks=(), booked=(), now=SUNDAY_WEEK_BEFORE, duration=50, session_type="video"):
    return generate_slots_for_day(
        day=MONDAY,
        session_type=session_type,
        rules=rules,
        duration_min=duration,
        tz_name=TZ,
        blocks=list(blocks),
        booked=list(booked),
        now=now,
        config=CONFIG,
    )


def starts(slots):
    return [s.start.astimezone(UTC) for s in slots]


class TestMondayMorning:
    """Monday 09:00–12:00 video, 50 minute sessions."""

    def test_every_ten_minutes_until_last_fitting_start(self):
        slots = generate([rule("09:00", "12:00")])

        expected = [at(9, 0) + timedelta(minutes=10 * i) for i in range(14)]
        assert starts(slots) == expected
        assert expected[-1] == at(11, 10)
        assert all(s.end - s.start == timedelta(minutes=50) for s in slots)
        assert all(s.end <= at(12, 0) for s in slots)
        assert all(s.session_type == "video" for s in slots)

    def test_block_removes_overlapping_candidates(self):
        slots = generate([rule("09:00", "12:00")], blocks=[(at(10, 0), at(10, 30))])

        assert starts(slots) == [
            at(9, 0), at(9, 10),
            at(10, 30), at(10, 40), at(10, 50), at(11, 0), at(11, 10),
        ]

    def test_booked_appointment_removes_overlapping_candidates(self):
        slots = generate([rule("09:00", "12:00")], booked=[(at(10, 0), at(10, 50))])

        # 09:10 ends exactly when the appointment starts, 10:50 starts when it ends
        assert starts(slots) == [at(9, 0), at(9, 10), at(10, 50), at(11, 0), at(11, 10)]

    def test_lead_time_wins_over_example_evening(self):
        """Sunday 18:00 the evening before leaves nothing before Monday 18:00."""
        assert generate([rule("09:00", "12:00")], now=SUNDAY_EVENING) == []

    def test_idempotent(self):
        rules = [rule("09:00", "12:00")]
        blocks = [(at(10, 0), at(10, 30))]
        assert generate(rules, blocks=blocks) == generate(rules, blocks=blocks)


class TestLeadTime:
    """Slots start no earlier than now + lead time."""

    def test_exact_boundary_is_included(self):
        now = at(10, 0) - timedelta(hours=24)
        slots = generate([rule("09:00", "12:00")], now=now)
        assert starts(slots)[0] == at(10, 0)

    def test_one_second_short_is_excluded(self):
        now = at(10, 0) - timedelta(hours=24) + timedelta(seconds=1)
        slots = generate([rule("09:00", "12:00")], now=now)
        assert starts(slots)[0] == at(10, 10)

    def test_naive_now_is_utc(self):
        naive_now = (at(10, 0) - timedelta(hours=24)).replace(tzinfo=None)
        slots = generate([rule("09:00", "12:00")], now=naive_now)
        assert starts(slots)[0] == at(10, 0)


class TestRuleWindows:
    """How multiple and degenerate rule windows behave."""

    def test_overlapping_rules_are_deduplicated(self):
        slots = generate([rule("09:00", "12:00"), rule("10:00", "12:00")])
        assert len(slots) == 14
        assert starts(slots) == sorted(set(starts(slots)))

    def test_adjacent_windows_are_not_merged(self):
        slots = generate([rule("09:00", "10:00"), rule("10:00", "11:00")])
        # 09:20 would fit across the boundary but fits in neither window
        assert starts(slots) == [at(9, 0), at(9, 10), at(10, 0), at(10, 10)]

    def test_empty_window_yields_nothing(self):
        assert generate([rule("09:00", "09:00")]) == []

    def test_duration_longer_than_window_yields_nothing(self):
        assert generate([rule("09:00", "12:00")], duration=240) == []

    def test_other_weekday_is_ignored(self):
        assert generate([rule("09:00", "12:00", weekday=2)]) == []

    def test_sunday_is_weekday_zero(self):
        sunday = MONDAY - timedelta(days=1)
        slots = generate_slots_for_day(
            day=sunday,
            session_type="video",
            rules=[rule("09:00", "10:00", weekday=0)],
            duration_min=50,
            tz_name=TZ,
            blocks=[],
            booked=[],
            now=SUNDAY_WEEK_BEFORE,
            config=CONFIG,
        )
        assert starts(slots) == [at(9, 0, day=sunday), at(9, 10, day=sunday)]
        assert generate([rule("09:00", "10:00", weekday=0)]) == []

    def test_saturday_is_weekday_six(self):
        saturday = MONDAY - timedelta(days=2)
        slots = generate_slots_for_day(
            day=saturday,
            session_type="video",
            rules=[rule("09:00", "10:00", weekday=6)],
            duration_min=50,
            tz_name=TZ,
            blocks=[],
            booked=[],
            now=SUNDAY_WEEK_BEFORE - timedelta(days=7),
            config=CONFIG,
        )
        assert len(slots) == 2

    def test_other_session_type_is_ignored(self):
        assert generate([rule("09:00", "12:00", session_type="chat")]) == []

    def test_inactive_rule_is_ignored(self):
        assert generate([rule("09:00", "12:00", is_active=False)]) == []

    def test_no_rules(self):
        assert generate([]) == []

    def test_step_follows_config(self):
        slots = generate_slots_for_day(
            day=MONDAY,
            session_type="video",
            rules=[rule("09:00", "10:00")],
            duration_min=30,
            tz_name=TZ,
            blocks=[],
            booked=[],
            now=SUNDAY_WEEK_BEFORE,
            config=BookingConfig(candidate_step_minutes=15),
        )
        assert starts(slots) == [at(9, 0), at(9, 15), at(9, 30)]


class TestIsCandidate:
    """Whether an interval is one the generator would offer, ignoring blocks and bookings."""

    RULES = [rule("09:00", "12:00")]

    def test_grid_start_inside_window(self):
        assert is_candidate(at(9, 0), at(9, 50), "video", self.RULES, TZ, CONFIG)
        assert is_candidate(at(11, 10), at(12, 0), "video", self.RULES, TZ, CONFIG)

    def test_off_grid_start(self):
        assert not is_candidate(at(9, 5), at(9, 55), "video", self.RULES, TZ, CONFIG)

    def test_past_window_end(self):
        assert not is_candidate(at(11, 20), at(12, 10), "video", self.RULES, TZ, CONFIG)

    def test_other_session_type(self):
        assert not is_candidate(at(9, 0), at(9, 50), "chat", self.RULES, TZ, CONFIG)

    def test_other_day(self):
        tuesday = MONDAY + timedelta(days=1)
        assert not is_candidate(
            at(9, 0, day=tuesday), at(9, 50, day=tuesday), "video", self.RULES, TZ, CONFIG
        )


class TestBookingConfig:
    """Engine constants are validated."""

    @pytest.mark.parametrize("step", [0, -10, 7])
    def test_step_must_divide_a_day(self, step):
        with pytest.raises(ValueError):
            BookingConfig(candidate_step_minutes=step)

    def test_defaults(self):
        config = BookingConfig()
        assert config.candidate_step_minutes == 10
        assert config.min_schedule_lead_hours == 24


class TestSlotStatus:
    """Provider agenda labels every candidate."""

    def test_precedence(self):
        # cut-off at Monday 09:30 local
        now = at(9, 30) - timedelta(hours=24)
        slots = generate_slots_with_status(
            day=MONDAY,
            session_type="video",
            rules=[rule("09:00", "12:00")],
            duration_min=50,
            tz_name=TZ,
            blocks=[(at(10, 0), at(10, 30))],
            booked=[(at(11, 30), at(12, 0))],
            now=now,
            config=CONFIG,
        )
        status = {s.start: s.status for s in slots}

        assert len(slots) == 14
        assert status[at(9, 0)] == SLOT_PAST
        assert status[at(9, 20)] == SLOT_PAST      # also blocked, past wins
        assert status[at(9, 30)] == SLOT_BLOCKED
        assert status[at(10, 20)] == SLOT_BLOCKED
        assert status[at(10, 30)] == SLOT_AVAILABLE
        assert status[at(10, 40)] == SLOT_AVAILABLE  # ends when the booking starts
        assert status[at(10, 50)] == SLOT_BOOKED
        assert status[at(11, 10)] == SLOT_BOOKED

    def test_booked_beats_past(self):
        slots = generate_slots_with_status(
            day=MONDAY,
            session_type="video",
            rules=[rule("09:00", "10:00")],
            duration_min=50,
            tz_name=TZ,
            blocks=[],
            booked=[(at(9, 0), at(9, 50))],
            now=SUNDAY_EVENING,
            config=CONFIG,
        )
        assert [s.status for s in slots] == [SLOT_BOOKED, SLOT_BOOKED]
