from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import func, select
from ...access import AccessState, require_state
from ...extensions import db
from ...forms import as_bool
from ...models import LocationFollower, RecurringEvent, StaffMembership, TradeSchedule
from ...permissions import Capability, require_capability
from ...plans import partition_events, plan_for_tier, slot_summary
from ...serializers import location_to_dict
from ...utils.timestamps import utcnow

dashboard_bp = Blueprint("location_dashboard", __name__, url_prefix="/api")


def count(statement):
    return db.session.scalar(statement) or 0


@dashboard_bp.route("/", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_dashboard():
    """
    Dashboard summary for an approved location
    ---
    tags:
      - Location
    security:
      - Bearer: []
    responses:
      200:
        description: Store, plan and activity counts
      403:
        description: Location is not approved
    """
    try:
        location = g.portal.location
        today = utcnow().date()

        events = db.session.scalars(
            select(RecurringEvent)
            .where(RecurringEvent.location_id == location.id)
            .order_by(RecurringEvent.id)
        ).all()
        active_events, inactive_events = partition_events(
            events, location.subscription_tier
        )

        upcoming_trades = count(
            select(func.count(TradeSchedule.id)).where(
                TradeSchedule.location_id == location.id,
                TradeSchedule.status == "confirmed",
                TradeSchedule.selected_date >= today,
            )
        )
        staff_count = count(
            select(func.count(StaffMembership.id)).where(
                StaffMembership.location_id == location.id,
                StaffMembership.status == "active",
            )
        )
        follower_count = count(
            select(func.count()).select_from(LocationFollower).where(
                LocationFollower.location_id == location.id
            )
        )

        return jsonify({
            "status": "success",
            "location": location_to_dict(location),
            "plan": plan_for_tier(location.subscription_tier),
            "stats": {
                "upcoming_trades": upcoming_trades,
                "active_events": len(active_events),
                "inactive_events": len(inactive_events),
                "staff": staff_count,
                "followers": follower_count,
            },
            "slots": slot_summary(len(events), location.subscription_tier),
            "capabilities": sorted(c.value for c in g.portal.capabilities),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load dashboard: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to load dashboard",
            "details": str(e)
        }), 500


@dashboard_bp.route("/info", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_location_info():
    """
    Location overview
    ---
    tags:
      - Location
    security:
      - Bearer: []
    responses:
      200:
        description: Business, address and visibility details
    """
    return jsonify({
        "status": "success",
        "location": location_to_dict(g.portal.location),
    }), 200


@dashboard_bp.route("/info/visibility", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.EDIT_LOCATION)
def update_visibility():
    """
    Show or hide the location in the consumer app
    ---
    tags:
      - Location
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [visible_on_app]
          properties:
            visible_on_app:
              type: boolean
    responses:
      200:
        description: Visibility updated
      400:
        description: visible_on_app missing
      403:
        description: Location not verified or caller lacks permission
    """
    try:
        data = request.get_json(silent=True) or {}
        if "visible_on_app" not in data:
            return jsonify({
                "status": "error",
                "message": "visible_on_app is required"
            }), 400

        location = g.portal.location
        if not location.verified:
            return jsonify({
                "status": "error",
                "message": "Your location must be verified before it can appear in the app"
            }), 403

        location.visible_on_app = as_bool(data["visible_on_app"])
        db.session.commit()

        return jsonify({
            "status": "success",
            "visible_on_app": location.visible_on_app,
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update visibility: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update visibility",
            "details": str(e)
        }), 500
