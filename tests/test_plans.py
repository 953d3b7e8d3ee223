import pytest

from portal.plans import (
    EventCapacityError,
    MAX_EVENT_SLOTS,
    PLANS,
    TIER_EVENT_LIMITS,
    can_add_event,
    day_or_night,
    ensure_event_capacity,
    event_display_name,
    event_limit,
    partition_events,
    plan_for_tier,
    slot_summary,
    subscription_status_for,
)


@pytest.mark.events
class TestPartitionEvents:
    def test_tier_limits(self):
        assert TIER_EVENT_LIMITS == {0: 0, 1: 2, 2: 2, 3: 4}

    def test_partition_invariant_for_every_tier(self):
        for tier, limit in TIER_EVENT_LIMITS.items():
            for count in range(0, 7):
                events = list(range(count))
                active, inactive = partition_events(events, tier)

                assert len(active) == min(count, limit)
                assert len(active) + len(inactive) == count
                assert active + inactive == events

    def test_tier_one_with_three_events(self):
        events = ["first", "second", "third"]
        active, inactive = partition_events(events, 1)

        assert active == ["first", "second"]
        assert inactive == ["third"]
        assert not can_add_event(len(events), 1)
        with pytest.raises(EventCapacityError) as exc:
            ensure_event_capacity(len(events), 1)
        assert exc.value.limit == 2
        assert "limit of 2 weekly events" in str(exc.value)

    def test_deleting_promotes_next_inactive_event(self):
        events = ["a", "b", "c"]
        events.remove("a")
        active, inactive = partition_events(events, 1)
        assert active == ["b", "c"]
        assert inactive == []

    def test_free_tier_cannot_add(self):
        assert event_limit(0) == 0
        assert not can_add_event(0, 0)

    def test_unknown_or_missing_tier_has_no_slots(self):
        assert event_limit(None) == 0
        assert event_limit(9) == 0

    def test_capacity_allows_below_limit(self):
        ensure_event_capacity(3, 3)


@pytest.mark.events
class TestSlotSummary:
    def test_premium_partially_filled(self):
        assert slot_summary(1, 3) == {
            "limit": 4,
            "active": 1,
            "inactive": 0,
            "empty": 3,
            "locked": 0,
        }

    def test_basic_over_limit_after_downgrade(self):
        summary = slot_summary(3, 1)
        assert summary["active"] == 2
        assert summary["inactive"] == 1
        assert summary["empty"] == 0
        assert summary["locked"] == MAX_EVENT_SLOTS - 3

    def test_free_all_locked(self):
        assert slot_summary(0, 0)["locked"] == MAX_EVENT_SLOTS


@pytest.mark.events
class TestEventNames:
    @pytest.mark.parametrize(
        "category,start,expected",
        [
            ("trade", "18:00", "Trade Night"),
            ("trade", "17:00", "Trade Night"),
            ("trade", "16:59", "Trade Day"),
            ("tournament", "10:00:00", "Tournament Day"),
            ("card_show", "19:30", "Card Show Night"),
            ("mystery", "12:00", "Event Day"),
            ("trade", None, "Trade Night"),
        ],
    )
    def test_display_name(self, category, start, expected):
        assert event_display_name(category, start) == expected

    def test_day_or_night_accepts_time(self):
        from datetime import time

        assert day_or_night(time(9, 0)) == "Day"
        assert day_or_night(time(21, 0)) == "Night"


class TestPlans:
    def test_four_plans_in_tier_order(self):
        assert [p["tier"] for p in PLANS] == [0, 1, 2, 3]
        assert [p["name"] for p in PLANS] == ["Free", "Basic", "Enhanced", "Premium"]

    def test_event_nights_match_limits(self):
        for plan in PLANS:
            assert plan["features"]["event_nights"] == str(TIER_EVENT_LIMITS[plan["tier"]])

    def test_plan_for_tier(self):
        assert plan_for_tier(2)["recommended"] is True
        assert plan_for_tier(7) is None

    def test_subscription_status(self):
        assert subscription_status_for(0) == "free"
        assert subscription_status_for(1) == "active"
        assert subscription_status_for(3) == "active"
