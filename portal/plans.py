"""Subscription tiers and the weekly event slots each tier unlocks."""

from datetime import time
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from portal.formatting import format_time_24

T = TypeVar("T")

TIER_EVENT_LIMITS: Dict[int, int] = {
    0: 0,  # Free
    1: 2,  # Basic
    2: 2,  # Enhanced
    3: 4,  # Premium
}
MAX_EVENT_SLOTS = 4
NIGHT_STARTS_AT = 17

EVENT_CATEGORIES: Dict[str, str] = {
    "trade": "Trade",
    "tournament": "Tournament",
    "card_show": "Card Show",
}

FEATURE_LABELS: Dict[str, str] = {
    "clickable_profile": "Clickable Profile",
    "badge": "Profile Badge",
    "search_boost": "Search Boost",
    "shop_photos": "Shop Photos",
    "event_nights": "Weekly Events",
    "special_events": "Special Events",
    "event_photos": "Event Photos",
    "rsvp_tracking": "RSVP Tracking",
    "analytics": "Analytics",
    "notify_followers": "Notify Followers",
    "state_alerts": "State-wide Alerts",
    "award_eligible": "Award Eligibility",
    "loyalty_program": "Loyalty Program",
}

PLANS: List[Dict] = [
    {
        "tier": 0,
        "name": "Free",
        "price": "$0",
        "price_note": "forever",
        "tagline": "Just get listed",
        "recommended": False,
        "features": {
            "clickable_profile": False,
            "badge": "None",
            "search_boost": "None",
            "shop_photos": "0",
            "event_nights": "0",
            "special_events": "0",
            "event_photos": "0",
            "rsvp_tracking": False,
            "analytics": False,
            "notify_followers": False,
            "state_alerts": False,
            "award_eligible": False,
            "loyalty_program": False,
        },
    },
    {
        "tier": 1,
        "name": "Basic",
        "price": "$50",
        "price_note": "/month",
        "tagline": "Establish your presence",
        "recommended": False,
        "features": {
            "clickable_profile": True,
            "badge": "None",
            "search_boost": "None",
            "shop_photos": "1",
            "event_nights": "2",
            "special_events": "0",
            "event_photos": "3",
            "rsvp_tracking": True,
            "analytics": False,
            "notify_followers": False,
            "state_alerts": False,
            "award_eligible": True,
            "loyalty_program": False,
        },
    },
    {
        "tier": 2,
        "name": "Enhanced",
        "price": "$150",
        "price_note": "/month",
        "tagline": "Stand out and grow",
        "recommended": True,
        "features": {
            "clickable_profile": True,
            "badge": "Verified",
            "search_boost": "10 miles",
            "shop_photos": "5",
            "event_nights": "2",
            "special_events": "4/year",
            "event_photos": "10",
            "rsvp_tracking": True,
            "analytics": "Full dashboard",
            "notify_followers": "1x/week",
            "state_alerts": False,
            "award_eligible": True,
            "loyalty_program": False,
        },
    },
    {
        "tier": 3,
        "name": "Premium",
        "price": "$300",
        "price_note": "/month",
        "tagline": "Dominate your state",
        "recommended": False,
        "features": {
            "clickable_profile": True,
            "badge": "Premium",
            "search_boost": "30 miles",
            "shop_photos": "Unlimited",
            "event_nights": "4",
            "special_events": "10/year",
            "event_photos": "Unlimited",
            "rsvp_tracking": True,
            "analytics": "Full + Reports",
            "notify_followers": "Unlimited",
            "state_alerts": True,
            "award_eligible": "Priority",
            "loyalty_program": True,
        },
    },
]


class EventCapacityError(Exception):
    """Raised when a location has no free weekly event slot on its tier."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"You've reached the limit of {limit} weekly events for your tier."
        )


def plan_for_tier(tier: int) -> Optional[Dict]:
    return next((plan for plan in PLANS if plan["tier"] == tier), None)


def subscription_status_for(tier: int) -> str:
    return "free" if tier == 0 else "active"


def event_limit(tier: Optional[int]) -> int:
    return TIER_EVENT_LIMITS.get(tier or 0, 0)


def partition_events(events: Sequence[T], tier: Optional[int]) -> Tuple[List[T], List[T]]:
    """
    Split insertion-ordered events into (active, inactive).

    Events past the tier allowance stay stored but inactive, e.g. after a
    downgrade. Deleting any event frees a slot for the next one in line.
    """
    limit = event_limit(tier)
    events = list(events)
    return events[:limit], events[limit:]


def can_add_event(current_count: int, tier: Optional[int]) -> bool:
    return current_count < event_limit(tier)


def ensure_event_capacity(current_count: int, tier: Optional[int]) -> None:
    if not can_add_event(current_count, tier):
        raise EventCapacityError(event_limit(tier))


def slot_summary(event_count: int, tier: Optional[int]) -> Dict[str, int]:
    limit = event_limit(tier)
    return {
        "limit": limit,
        "active": min(event_count, limit),
        "inactive": max(0, event_count - limit),
        "empty": max(0, limit - event_count),
        "locked": max(0, MAX_EVENT_SLOTS - max(limit, event_count)),
    }


def day_or_night(start: Optional[Union[str, time]]) -> str:
    if not start:
        return "Night"
    hour = int(format_time_24(start).split(":")[0])
    return "Night" if hour >= NIGHT_STARTS_AT else "Day"


def event_display_name(category: str, start: Optional[Union[str, time]]) -> str:
    label = EVENT_CATEGORIES.get(category, "Event")
    return f"{label} {day_or_night(start)}"
