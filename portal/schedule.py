"""
Weekly schedule grid for a location.

Weeks run Sunday through Saturday. Trades are listed per day, confirmed
only, grouped by their "HH:MM" start (or "TBD" while no time is set).
All-day blocked dates are flagged on the grid; blocking a date never
cancels trades by itself.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from portal.formatting import format_time_24, to_12_hour

TBD = "TBD"
DAYS_IN_WEEK = 7


@dataclass
class TimeGroup:
    time: str
    trades: list = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.time if self.time == TBD else to_12_hour(self.time)


@dataclass
class DayColumn:
    date: date
    blocked: bool
    groups: List[TimeGroup] = field(default_factory=list)

    @property
    def trade_count(self) -> int:
        return sum(len(group.trades) for group in self.groups)


def week_start(anchor: date) -> date:
    # date.weekday(): Monday == 0 ... Sunday == 6
    return anchor - timedelta(days=(anchor.weekday() + 1) % DAYS_IN_WEEK)


def shift_week(anchor: date, weeks: int) -> date:
    return week_start(anchor) + timedelta(days=DAYS_IN_WEEK * weeks)


def week_days(anchor: date) -> List[date]:
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(DAYS_IN_WEEK)]


def sort_key(trade) -> str:
    return trade.selected_time or "00:00"


def trades_for_date(day: date, trades: Iterable) -> list:
    """Confirmed trades on a date, ordered by their start time string."""
    matches = [
        t for t in trades if t.selected_date == day and t.status == "confirmed"
    ]
    return sorted(matches, key=sort_key)


def group_by_time(trades: Sequence) -> List[TimeGroup]:
    # One group per time, in order of first appearance
    groups: Dict[str, TimeGroup] = {}
    for trade in trades:
        key = trade.selected_time or TBD
        groups.setdefault(key, TimeGroup(time=key)).trades.append(trade)
    return list(groups.values())


def is_all_day(block) -> bool:
    """A block without both times covers the whole day."""
    return bool(block.all_day) or block.start_time is None or block.end_time is None


def is_date_blocked(day: date, blocked: Iterable) -> bool:
    return any(b.date == day and is_all_day(b) for b in blocked)


def build_week(anchor: date, trades: Iterable, blocked: Iterable) -> List[DayColumn]:
    trades = list(trades)
    blocked = list(blocked)
    return [
        DayColumn(
            date=day,
            blocked=is_date_blocked(day, blocked),
            groups=group_by_time(trades_for_date(day, trades)),
        )
        for day in week_days(anchor)
    ]


def _time_in_block(selected_time: Optional[str], block) -> bool:
    if not selected_time:
        return True
    start = format_time_24(block.start_time)
    end = format_time_24(block.end_time)
    return start <= selected_time < end


def conflicting_trades(block, trades: Iterable) -> list:
    """Confirmed trades a blocked period would overlap."""
    same_day = trades_for_date(block.date, trades)
    if is_all_day(block):
        return same_day
    return [t for t in same_day if _time_in_block(t.selected_time, block)]
