"""
Tests for streaks, completion windows, the presence heatmap and stats payload.
"""

import pytest

from core import dates
from models import CheckIn, ResearchEntry
from services.activity_analytics import (
    Completion,
    build_presence_map,
    build_recent_feed,
    build_stats_payload,
    build_user_stats,
    compute_completion,
    compute_streak,
    round_percent,
)

from conftest import FROZEN_DAY


def _checkin(db, user, day):
    db.add(CheckIn(user_id=user.id, day=day, note=None, created_at=f"{day}T08:00:00.000Z"))


def _research(db, user, day, title="note"):
    db.add(ResearchEntry(
        user_id=user.id,
        day=day,
        title=title,
        summary="s",
        tickers="",
        links=[],
        confidence=3,
        minutes_spent=0,
        created_at=f"{day}T09:00:00.000Z",
    ))


def _days_before(n):
    return dates.shift_day(FROZEN_DAY, -n)


class _StorageForbidden:
    """Stands in for a Session; any use of it fails the test."""

    def __getattr__(self, name):
        raise AssertionError(f"storage accessed via Session.{name}")


class TestRoundPercent:

    @pytest.mark.parametrize("completed,total,expected", [
        (1, 8, 13),
        (1, 7, 14),
        (2, 7, 29),
        (1, 3, 33),
        (2, 3, 67),
        (0, 30, 0),
        (30, 30, 100),
    ])
    def test_half_up(self, completed, total, expected):
        assert round_percent(completed, total) == expected


class TestStreak:

    def test_consecutive_days_ending_today(self, db_session, shamil, frozen_now):
        for n in range(4):
            _checkin(db_session, shamil, _days_before(n))
        _checkin(db_session, shamil, _days_before(6))
        db_session.commit()

        assert compute_streak(db_session, shamil.id) == 4

    def test_missing_today_breaks_streak(self, db_session, shamil, frozen_now):
        for n in range(1, 5):
            _checkin(db_session, shamil, _days_before(n))
        db_session.commit()

        assert compute_streak(db_session, shamil.id) == 0

    def test_no_checkins(self, db_session, shamil, frozen_now):
        assert compute_streak(db_session, shamil.id) == 0

    def test_research_does_not_count(self, db_session, shamil, frozen_now):
        _research(db_session, shamil, FROZEN_DAY)
        db_session.commit()
        assert compute_streak(db_session, shamil.id) == 0

    def test_other_users_rows_ignored(self, db_session, shamil, halit, frozen_now):
        _checkin(db_session, halit, FROZEN_DAY)
        db_session.commit()
        assert compute_streak(db_session, shamil.id) == 0
        assert compute_streak(db_session, halit.id) == 1


class TestCompletion:

    @pytest.mark.parametrize("window", [0, -3])
    def test_non_positive_window_skips_storage(self, frozen_now, window):
        assert compute_completion(_StorageForbidden(), 1, window) == Completion(0, 0, 0)

    def test_counts_days_in_window(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, FROZEN_DAY)
        _checkin(db_session, shamil, _days_before(3))
        db_session.commit()

        result = compute_completion(db_session, shamil.id, 7)
        assert result == Completion(total_days=7, completed_days=2, percent=29)

    def test_lower_bound_inclusive(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, _days_before(6))
        _checkin(db_session, shamil, _days_before(7))
        db_session.commit()

        assert compute_completion(db_session, shamil.id, 7).completed_days == 1

    def test_future_dated_rows_still_counted(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, dates.shift_day(FROZEN_DAY, 2))
        db_session.commit()

        assert compute_completion(db_session, shamil.id, 7).completed_days == 1

    def test_percent_half_up(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, FROZEN_DAY)
        db_session.commit()

        assert compute_completion(db_session, shamil.id, 8).percent == 13

    def test_explicit_today(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, "2024-01-01")
        db_session.commit()

        assert compute_completion(db_session, shamil.id, 1, today="2024-01-01").completed_days == 1
        assert compute_completion(db_session, shamil.id, 1).completed_days == 0


class TestPresenceMap:

    def test_length_order_and_counts(self, db_session, shamil, halit, frozen_now):
        _checkin(db_session, shamil, FROZEN_DAY)
        _research(db_session, shamil, FROZEN_DAY)
        _research(db_session, shamil, FROZEN_DAY, title="second")
        _checkin(db_session, shamil, _days_before(2))
        _checkin(db_session, shamil, _days_before(20))
        _checkin(db_session, halit, _days_before(1))
        db_session.commit()

        heatmap = build_presence_map(db_session, shamil.id, 5)

        assert [cell.day for cell in heatmap] == dates.day_range(5)
        assert [cell.count for cell in heatmap] == [0, 0, 1, 0, 3]

    def test_empty_user_gets_all_zero_cells(self, db_session, halit, frozen_now):
        heatmap = build_presence_map(db_session, halit.id, 90)
        assert len(heatmap) == 90
        assert heatmap[-1].day == FROZEN_DAY
        assert all(cell.count == 0 for cell in heatmap)

    @pytest.mark.parametrize("days_back", [0, -1])
    def test_non_positive_window_skips_storage(self, frozen_now, days_back):
        assert build_presence_map(_StorageForbidden(), 1, days_back) == []


class TestFeedAndStats:

    def test_feed_filter(self, db_session, shamil, halit, frozen_now):
        _research(db_session, shamil, _days_before(1), title="s1")
        _research(db_session, halit, FROZEN_DAY, title="h1")
        _research(db_session, shamil, _days_before(40), title="s-old")
        db_session.commit()

        assert [e.title for e in build_recent_feed(db_session, "All", 30, 30)] == ["h1", "s1"]
        assert [e.title for e in build_recent_feed(db_session, "Shamil", 90, 30)] == ["s1", "s-old"]
        assert [e.title for e in build_recent_feed(db_session, "All", 90, 1)] == ["h1"]

    def test_user_stats_card(self, db_session, shamil, frozen_now):
        _checkin(db_session, shamil, FROZEN_DAY)
        _research(db_session, shamil, _days_before(1))
        db_session.commit()

        stats = build_user_stats(db_session, shamil, heatmap_days=14)
        assert stats.has_today is True
        assert stats.streak == 1
        assert stats.last_activity == f"{FROZEN_DAY}T08:00:00.000Z"
        assert stats.completion7 == Completion(7, 1, 14)
        assert stats.completion30 == Completion(30, 1, 3)
        assert stats.completion90 == Completion(90, 1, 1)
        assert len(stats.heatmap) == 14

    def test_fresh_install_payload(self, db_session, frozen_now):
        payload = build_stats_payload(db_session)

        assert payload["generated_at"] == "2024-04-10T12:00:00.000Z"
        assert [row["name"] for row in payload["data"]] == ["Halit", "Shamil"]
        for row in payload["data"]:
            assert row["streak"] == 0
            assert row["completion7"] == Completion(7, 0, 0)
            assert row["completion90"] == Completion(90, 0, 0)
