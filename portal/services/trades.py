"""Location side trade cancellation."""

from typing import List

from flask import current_app
from sqlalchemy import select

from portal.extensions import db
from portal.models import TradeSchedule, UserDevice
from portal.utils.timestamps import utcnow

CANCELLED_TITLE = "Trade Cancelled"


class InvalidTransitionError(Exception):
    """Raised when a trade schedule is not in a state that allows the change."""


def cancellation_message(store_name: str) -> str:
    return f"Your trade at {store_name} has been cancelled by the location."


def participant_ids(schedule: TradeSchedule) -> List[int]:
    request = schedule.trade_request
    if request is None:
        return []
    return sorted({request.requester_id, request.card_owner_id})


def device_ids_for(user_ids) -> List[str]:
    if not user_ids:
        return []
    rows = db.session.scalars(
        select(UserDevice.onesignal_player_id).where(
            UserDevice.user_id.in_(user_ids),
            UserDevice.onesignal_player_id.is_not(None),
        )
    ).all()
    return list(rows)


def mark_cancelled(schedule: TradeSchedule) -> None:
    if schedule.status != "confirmed":
        raise InvalidTransitionError(
            f"Trade schedule {schedule.id} is {schedule.status}, not confirmed"
        )
    schedule.status = "cancelled"
    schedule.cancelled_at = utcnow()


def notify_cancelled(schedule: TradeSchedule, location, push_service) -> dict:
    """Best effort: failures are logged and reported, never raised."""
    try:
        player_ids = device_ids_for(participant_ids(schedule))
        result = push_service.send(
            player_ids, CANCELLED_TITLE, cancellation_message(location.store_name)
        )
    except Exception as e:
        current_app.logger.warning(
            f"Could not notify participants of trade schedule {schedule.id}: {e}"
        )
        return {"success": False, "error": str(e)}

    if not result.get("success"):
        current_app.logger.warning(
            f"Push notification not delivered for trade schedule {schedule.id}: "
            f"{result.get('error')}"
        )
    return result


def cancel_trade(schedule: TradeSchedule, location, push_service) -> dict:
    """
    Cancel a confirmed trade and tell both participants.

    The status change is committed before any notification is attempted,
    so a push failure never undoes or blocks the cancellation.
    """
    mark_cancelled(schedule)
    db.session.commit()
    current_app.logger.info(
        f"Trade schedule {schedule.id} cancelled by location {location.id}"
    )
    return notify_cancelled(schedule, location, push_service)


def cancel_trades(schedules, location, push_service) -> List[int]:
    """Cancel every still confirmed schedule given; returns the ids cancelled."""
    cancelled = []
    for schedule in schedules:
        if schedule.status != "confirmed":
            continue
        mark_cancelled(schedule)
        cancelled.append(schedule)
    db.session.commit()

    for schedule in cancelled:
        current_app.logger.info(
            f"Trade schedule {schedule.id} cancelled by location {location.id}"
        )
        notify_cancelled(schedule, location, push_service)
    return [s.id for s in cancelled]
