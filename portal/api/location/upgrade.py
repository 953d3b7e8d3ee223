from flask import Blueprint, request, jsonify, current_app, g
from ...access import AccessState, require_state
from ...extensions import db
from ...permissions import Capability, require_capability
from ...plans import (
    FEATURE_LABELS,
    PLANS,
    plan_for_tier,
    slot_summary,
    subscription_status_for,
)
from .events import location_events

upgrade_bp = Blueprint("location_upgrade", __name__, url_prefix="/api/upgrade")


@upgrade_bp.route("", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_plans():
    """
    Plan comparison and the current tier
    ---
    tags:
      - Plans
    security:
      - Bearer: []
    responses:
      200:
        description: All plans with feature allowances
    """
    location = g.portal.location
    return jsonify({
        "status": "success",
        "current_tier": location.subscription_tier,
        "subscription_status": location.subscription_status,
        "plans": PLANS,
        "feature_labels": FEATURE_LABELS,
    }), 200


@upgrade_bp.route("", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_PLAN)
def change_plan():
    """
    Switch subscription tier
    ---
    tags:
      - Plans
    security:
      - Bearer: []
    description: >
      Downgrading keeps every weekly event; events past the new allowance
      become inactive until slots free up.
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [tier]
          properties:
            tier:
              type: integer
              enum: [0, 1, 2, 3]
    responses:
      200:
        description: Tier changed, or unchanged when it already matched
      400:
        description: Unknown tier
    """
    try:
        data = request.get_json(silent=True) or {}
        tier = data.get("tier")
        if isinstance(tier, bool) or not isinstance(tier, int) or not plan_for_tier(tier):
            return jsonify({
                "status": "error",
                "message": "Tier must be one of 0, 1, 2, 3"
            }), 400

        location = g.portal.location
        if location.subscription_tier == tier:
            return jsonify({
                "status": "success",
                "message": "Already on this plan",
                "changed": False,
                "current_tier": tier,
                "subscription_status": location.subscription_status,
            }), 200

        previous = location.subscription_tier
        location.subscription_tier = tier
        location.subscription_status = subscription_status_for(tier)
        db.session.commit()
        current_app.logger.info(
            f"Location {location.id} changed plan from tier {previous} to {tier}"
        )

        return jsonify({
            "status": "success",
            "message": f"Switched to {plan_for_tier(tier)['name']}",
            "changed": True,
            "current_tier": tier,
            "subscription_status": location.subscription_status,
            "slots": slot_summary(len(location_events(location.id)), tier),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to change plan: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to change plan",
            "details": str(e)
        }), 500
