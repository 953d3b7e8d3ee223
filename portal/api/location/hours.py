from flask import Blueprint, request, jsonify, current_app, g
from ...access import AccessState, require_state
from ...extensions import db
from ...formatting import hours_from_storage, hours_to_storage
from ...forms import ValidationError, read_hours
from ...permissions import Capability, require_capability

hours_bp = Blueprint("location_hours", __name__, url_prefix="/api/hours")


@hours_bp.route("", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_hours():
    """
    Weekly operating hours
    ---
    tags:
      - Operating Hours
    security:
      - Bearer: []
    responses:
      200:
        description: Per-day open/close in 24-hour form plus the stored display strings
    """
    location = g.portal.location
    hours = hours_from_storage(location.operating_hours)

    return jsonify({
        "status": "success",
        "hours": hours,
        "display": hours_to_storage(hours),
        "is_default": not location.operating_hours,
    }), 200


@hours_bp.route("", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.EDIT_LOCATION)
def update_hours():
    """
    Save weekly operating hours
    ---
    tags:
      - Operating Hours
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            hours:
              type: object
              description: "{monday: {open: '09:00', close: '17:00', closed: false}, ...}"
    responses:
      200:
        description: Hours saved
      400:
        description: A day is missing or has invalid times
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            hours = read_hours(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        location.operating_hours = hours_to_storage(hours)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Hours updated",
            "hours": hours_from_storage(location.operating_hours),
            "display": location.operating_hours,
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update hours: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update hours",
            "details": str(e)
        }), 500
