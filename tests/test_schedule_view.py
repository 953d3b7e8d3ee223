from datetime import date, time, timedelta
from types import SimpleNamespace

import pytest

from portal.schedule import (
    TBD,
    build_week,
    conflicting_trades,
    is_date_blocked,
    shift_week,
    trades_for_date,
    week_days,
    week_start,
)


def trade(day, at=None, status="confirmed", id=None):
    return SimpleNamespace(id=id, selected_date=day, selected_time=at, status=status)


def block(day, all_day=True, start=None, end=None):
    return SimpleNamespace(date=day, all_day=all_day, start_time=start, end_time=end)


@pytest.mark.schedule
class TestWeekAnchor:
    def test_wednesday_normalizes_to_sunday(self):
        days = week_days(date(2024, 3, 13))
        assert days[0] == date(2024, 3, 10)
        assert days[-1] == date(2024, 3, 16)
        assert len(days) == 7

    def test_sunday_is_idempotent(self):
        sunday = date(2024, 3, 10)
        assert week_start(sunday) == sunday
        assert week_start(week_start(date(2024, 3, 16))) == sunday

    def test_every_day_of_the_week(self):
        for offset in range(7):
            assert week_start(date(2024, 3, 10) + timedelta(days=offset)) == date(2024, 3, 10)

    def test_shift_week(self):
        assert shift_week(date(2024, 3, 13), 1) == date(2024, 3, 17)
        assert shift_week(date(2024, 3, 13), -1) == date(2024, 3, 3)
        assert shift_week(date(2024, 3, 13), 0) == date(2024, 3, 10)


@pytest.mark.schedule
class TestTradesForDate:
    def test_confirmed_only_sorted_by_time(self):
        day = date(2024, 3, 12)
        trades = [
            trade(day, "14:30", id=1),
            trade(day, "09:00", id=2),
            trade(day, "11:00", status="cancelled", id=3),
            trade(day, None, id=4),
            trade(day + timedelta(days=1), "08:00", id=5),
        ]
        assert [t.id for t in trades_for_date(day, trades)] == [4, 2, 1]

    def test_build_week_groups_by_time(self):
        day = date(2024, 3, 12)
        trades = [
            trade(day, "14:30", id=1),
            trade(day, "14:30", id=2),
            trade(day, None, id=3),
        ]
        columns = build_week(date(2024, 3, 13), trades, [])

        tuesday = columns[2]
        assert tuesday.date == day
        assert [g.time for g in tuesday.groups] == [TBD, "14:30"]
        assert tuesday.groups[1].label == "2:30 PM"
        assert tuesday.trade_count == 3
        assert all(c.trade_count == 0 for i, c in enumerate(columns) if i != 2)

    def test_all_day_block_marks_the_date(self):
        day = date(2024, 3, 14)
        blocks = [
            block(day),
            block(day + timedelta(days=1), all_day=False, start=time(12, 0), end=time(14, 0)),
        ]

        assert is_date_blocked(day, blocks)
        assert not is_date_blocked(day + timedelta(days=1), blocks)

        columns = build_week(day, [], blocks)
        assert [c.blocked for c in columns] == [False, False, False, False, True, False, False]

    def test_block_without_times_covers_the_day(self):
        day = date(2024, 3, 12)
        untimed = block(day, all_day=False)

        assert is_date_blocked(day, [untimed])
        assert build_week(day, [], [untimed])[2].blocked is True

    def test_tbd_and_midnight_trades_each_form_one_group(self):
        day = date(2024, 3, 12)
        trades = [
            trade(day, None, id=1),
            trade(day, "00:00", id=2),
            trade(day, None, id=3),
            trade(day, "09:00", id=4),
        ]
        tuesday = build_week(day, trades, [])[2]

        assert [g.time for g in tuesday.groups] == [TBD, "00:00", "09:00"]
        assert [t.id for t in tuesday.groups[0].trades] == [1, 3]
        assert tuesday.trade_count == 4


@pytest.mark.schedule
class TestConflicts:
    def test_all_day_block_conflicts_with_every_confirmed_trade(self):
        day = date(2024, 3, 14)
        trades = [
            trade(day, "10:00", id=1),
            trade(day, "18:00", id=2),
            trade(day, "12:00", status="cancelled", id=3),
            trade(day + timedelta(days=1), "10:00", id=4),
        ]
        assert [t.id for t in conflicting_trades(block(day), trades)] == [1, 2]

    def test_timed_block_uses_half_open_range(self):
        day = date(2024, 3, 14)
        trades = [
            trade(day, "11:59", id=1),
            trade(day, "12:00", id=2),
            trade(day, "13:59", id=3),
            trade(day, "14:00", id=4),
            trade(day, None, id=5),
        ]
        timed = block(day, all_day=False, start=time(12, 0), end=time(14, 0))
        assert [t.id for t in conflicting_trades(timed, trades)] == [5, 2, 3]

    def test_untimed_block_conflicts_with_the_whole_day(self):
        day = date(2024, 3, 14)
        trades = [trade(day, "08:00", id=1), trade(day, "21:30", id=2)]
        untimed = block(day, all_day=False)

        assert [t.id for t in conflicting_trades(untimed, trades)] == [1, 2]
