from flask import Blueprint, request, jsonify, current_app, g
from ..access import AccessState, require_state
from ..extensions import db
from ..forms import ValidationError, read_application
from ..serializers import application_to_dict
from ..utils.timestamps import utcnow

application_bp = Blueprint("application", __name__, url_prefix="/api/pending")

STATUS_LABELS = {
    "pending": "Under review",
    "rejected": "Not approved",
}


@application_bp.route("", methods=["GET"])
@require_state(AccessState.PENDING, AccessState.REJECTED)
def get_application():
    """
    Application summary while awaiting review
    ---
    tags:
      - Application
    security:
      - Bearer: []
    responses:
      200:
        description: Submitted fields, timestamps and review status
      403:
        description: Caller is not pending or rejected
    """
    location = g.portal.location
    application = application_to_dict(location)

    return jsonify({
        "status": "success",
        "state": g.portal.state.value,
        "status_label": STATUS_LABELS.get(application["status"], "Under review"),
        "application": application,
    }), 200


@application_bp.route("", methods=["PUT"])
@require_state(AccessState.PENDING, AccessState.REJECTED)
def update_application():
    """
    Edit the submitted application
    ---
    tags:
      - Application
    security:
      - Bearer: []
    description: Editing does not affect your place in the review queue.
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [business_name]
    responses:
      200:
        description: Application updated
      400:
        description: Business name missing or a field is invalid
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_application(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        for key, value in fields.items():
            setattr(location, key, value)
        location.application_updated_at = utcnow()
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Application updated",
            "state": g.portal.state.value,
            "application": application_to_dict(location),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Application update failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update application",
            "details": str(e)
        }), 500
