# Partner intake form, the first write in a location's lifecycle
from flask import Blueprint, request, jsonify, current_app, g
from ..access import AccessState, STATE_HOME, require_state
from ..extensions import db
from ..forms import ValidationError, read_application
from ..models import Location, StaffMembership
from ..plans import subscription_status_for
from ..serializers import application_to_dict
from ..utils.timestamps import utcnow

intake_bp = Blueprint("intake", __name__, url_prefix="/api/intake")


@intake_bp.route("", methods=["POST"])
@require_state(AccessState.NEEDS_INTAKE)
def submit_intake():
    """
    Submit a location application
    ---
    tags:
      - Application
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [business_name]
          properties:
            business_name:
              type: string
            phone:
              type: string
            address:
              type: string
            city:
              type: string
            state:
              type: string
              maxLength: 2
            zip:
              type: string
              maxLength: 10
            website:
              type: string
            description:
              type: string
    responses:
      201:
        description: Application created and awaiting review
      400:
        description: Business name missing or a field is invalid
      403:
        description: Caller already has a location record
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_application(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        account = g.portal.account
        now = utcnow()

        location = Location(
            owner_id=account.id,
            subscription_tier=0,
            subscription_status=subscription_status_for(0),
            visible_on_app=False,
            verified=False,
            application_approved=False,
            rejected=False,
            submitted_at=now,
            application_updated_at=now,
            **fields,
        )
        db.session.add(location)
        db.session.flush()

        db.session.add(
            StaffMembership(
                location_id=location.id,
                user_id=account.id,
                role="owner",
                can_add_staff=True,
                status="active",
                invited_at=now,
                accepted_at=now,
            )
        )
        db.session.commit()
        current_app.logger.info(
            f"Location {location.id} submitted for review by user {account.id}"
        )

        return jsonify({
            "status": "success",
            "message": "Application submitted",
            "state": AccessState.PENDING.value,
            "redirect": STATE_HOME[AccessState.PENDING],
            "application": application_to_dict(location),
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Intake submission failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to submit application",
            "details": str(e)
        }), 500
