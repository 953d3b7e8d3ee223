"""
Weekly recurring events.

A location's tier decides how many of its events are active. Events are
kept in insertion order; those past the allowance stay stored but are
reported as inactive until a delete or an upgrade frees a slot.
"""

from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import select
from ...access import AccessState, require_state
from ...extensions import db
from ...forms import ValidationError, read_event
from ...models import RecurringEvent
from ...permissions import Capability, require_capability
from ...plans import (
    EVENT_CATEGORIES,
    EventCapacityError,
    ensure_event_capacity,
    event_display_name,
    event_limit,
    partition_events,
    slot_summary,
)
from ...serializers import event_to_dict

events_bp = Blueprint("location_events", __name__, url_prefix="/api/events")


def location_events(location_id):
    return db.session.scalars(
        select(RecurringEvent)
        .where(
            RecurringEvent.location_id == location_id,
            RecurringEvent.is_recurring.is_(True),
        )
        .order_by(RecurringEvent.id)
    ).all()


def events_payload(location):
    events = location_events(location.id)
    active, inactive = partition_events(events, location.subscription_tier)
    return {
        "active": [event_to_dict(e, active=True) for e in active],
        "inactive": [event_to_dict(e, active=False) for e in inactive],
        "slots": slot_summary(len(events), location.subscription_tier),
        "can_add": len(events) < event_limit(location.subscription_tier),
    }


@events_bp.route("", methods=["GET"])
@require_state(AccessState.APPROVED)
def list_events():
    """
    Weekly events split into active and inactive
    ---
    tags:
      - Events
    security:
      - Bearer: []
    responses:
      200:
        description: Events, slot summary and whether another can be added
    """
    try:
        payload = events_payload(g.portal.location)
        return jsonify({
            "status": "success",
            "categories": EVENT_CATEGORIES,
            **payload,
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load events: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to load events",
            "details": str(e)
        }), 500


@events_bp.route("", methods=["POST"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_SCHEDULE)
def add_event():
    """
    Add a weekly event
    ---
    tags:
      - Events
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [category, day, start_time, end_time]
          properties:
            category:
              type: string
              enum: [trade, tournament, card_show]
            day:
              type: string
              example: Friday
            start_time:
              type: string
              example: "6:00 PM"
            end_time:
              type: string
              example: "9:00 PM"
    responses:
      201:
        description: Event created
      400:
        description: A field is missing or invalid
      409:
        description: No free event slot on the current tier
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_event(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        existing = location_events(location.id)
        try:
            ensure_event_capacity(len(existing), location.subscription_tier)
        except EventCapacityError as e:
            return jsonify({
                "status": "error",
                "message": str(e),
                "limit": e.limit,
            }), 409

        event = RecurringEvent(
            location_id=location.id,
            name=event_display_name(fields["category"], fields["start_time"]),
            is_recurring=True,
            **fields,
        )
        db.session.add(event)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Event added",
            "event": event_to_dict(event),
            **events_payload(location),
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to add event: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to add event",
            "details": str(e)
        }), 500


@events_bp.route("/<int:event_id>", methods=["DELETE"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_SCHEDULE)
def remove_event(event_id):
    """
    Remove a weekly event
    ---
    tags:
      - Events
    security:
      - Bearer: []
    parameters:
      - in: path
        name: event_id
        type: integer
        required: true
    responses:
      200:
        description: Event removed; remaining events are re-partitioned
      404:
        description: Event not found
    """
    try:
        location = g.portal.location
        event = db.session.get(RecurringEvent, event_id)
        if not event or event.location_id != location.id:
            return jsonify({"status": "error", "message": "Event not found"}), 404

        db.session.delete(event)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Event removed",
            **events_payload(location),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to remove event {event_id}: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to remove event",
            "details": str(e)
        }), 500
