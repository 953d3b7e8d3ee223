# Location staff management
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import or_, select
from ...access import AccessState, require_state
from ...extensions import db
from ...models import Account, StaffMembership
from ...permissions import Capability, require_capability
from ...serializers import owner_to_dict, staff_to_dict
from ...utils.timestamps import utcnow

staff_bp = Blueprint("location_staff", __name__, url_prefix="/api/staff")

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 10


def current_staff(location_id):
    return db.session.scalars(
        select(StaffMembership)
        .where(
            StaffMembership.location_id == location_id,
            StaffMembership.status != "removed",
        )
        .order_by(StaffMembership.id)
    ).all()


def membership_for_location(staff_id, location_id):
    membership = db.session.get(StaffMembership, staff_id)
    if membership is None or membership.location_id != location_id:
        return None
    return membership


@staff_bp.route("", methods=["GET"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.VIEW_LOCATION)
def list_staff():
    """
    Staff members of the location
    ---
    tags:
      - Staff
    security:
      - Bearer: []
    responses:
      200:
        description: Active and pending staff, owner first
    """
    try:
        staff = current_staff(g.portal.location.id)
        staff = sorted(staff, key=lambda s: (s.role != "owner", s.id))

        return jsonify({
            "status": "success",
            "staff": [staff_to_dict(s) for s in staff],
            "can_manage_staff": g.portal.can(Capability.MANAGE_STAFF),
            "can_grant_admin": g.portal.can(Capability.GRANT_STAFF_ADMIN),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load staff: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to load staff",
            "details": str(e)
        }), 500


@staff_bp.route("/search", methods=["GET"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_STAFF)
def search_users():
    """
    Find accounts to add as staff
    ---
    tags:
      - Staff
    security:
      - Bearer: []
    parameters:
      - name: q
        in: query
        type: string
        required: true
        description: Username, first name or email fragment (at least 2 characters)
    responses:
      200:
        description: Up to 10 matching accounts that are not already staff
    """
    try:
        query = (request.args.get("q") or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            return jsonify({"status": "success", "results": []}), 200

        existing_ids = [s.user_id for s in current_staff(g.portal.location.id)]
        pattern = f"%{query}%"

        statement = select(Account).where(
            or_(
                Account.username.ilike(pattern),
                Account.first_name.ilike(pattern),
                Account.email.ilike(pattern),
            )
        )
        if existing_ids:
            statement = statement.where(Account.id.not_in(existing_ids))

        accounts = db.session.scalars(
            statement.order_by(Account.id).limit(SEARCH_LIMIT)
        ).all()

        return jsonify({
            "status": "success",
            "results": [owner_to_dict(a) for a in accounts],
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Staff search failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to search users",
            "details": str(e)
        }), 500


@staff_bp.route("", methods=["POST"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_STAFF)
def add_staff():
    """
    Add an account as staff
    ---
    tags:
      - Staff
    security:
      - Bearer: []
    description: Re-adding a removed staff member reactivates the existing row.
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [user_id]
          properties:
            user_id:
              type: integer
    responses:
      201:
        description: Staff member added
      200:
        description: Existing membership reactivated
      400:
        description: user_id missing or refers to the owner
      404:
        description: Account not found
    """
    try:
        data = request.get_json(silent=True) or {}
        user_id = data.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return jsonify({"status": "error", "message": "user_id is required"}), 400

        account = db.session.get(Account, user_id)
        if not account:
            return jsonify({"status": "error", "message": "User not found"}), 404

        location = g.portal.location
        now = utcnow()

        membership = db.session.scalar(
            select(StaffMembership).where(
                StaffMembership.location_id == location.id,
                StaffMembership.user_id == user_id,
            )
        )
        if membership is not None and membership.role == "owner":
            return jsonify({
                "status": "error",
                "message": "The owner is already part of this location"
            }), 400

        created = membership is None
        if created:
            membership = StaffMembership(location_id=location.id, user_id=user_id)
            db.session.add(membership)

        membership.role = "staff"
        membership.status = "active"
        membership.can_add_staff = False
        membership.invited_by = g.portal.account.id
        membership.invited_at = now
        membership.accepted_at = now
        db.session.commit()
        current_app.logger.info(
            f"User {user_id} added as staff at location {location.id}"
        )

        return jsonify({
            "status": "success",
            "message": "Staff member added",
            "staff": staff_to_dict(membership),
        }), 201 if created else 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to add staff: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to add staff member",
            "details": str(e)
        }), 500


@staff_bp.route("/<int:staff_id>", methods=["DELETE"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_STAFF)
def remove_staff(staff_id):
    """
    Remove a staff member
    ---
    tags:
      - Staff
    security:
      - Bearer: []
    parameters:
      - in: path
        name: staff_id
        type: integer
        required: true
    responses:
      200:
        description: Membership marked removed
      400:
        description: The owner cannot be removed
      404:
        description: Staff member not found
    """
    try:
        membership = membership_for_location(staff_id, g.portal.location.id)
        if not membership or membership.status == "removed":
            return jsonify({"status": "error", "message": "Staff member not found"}), 404

        if membership.role == "owner":
            return jsonify({
                "status": "error",
                "message": "The owner cannot be removed"
            }), 400

        membership.status = "removed"
        db.session.commit()

        return jsonify({"status": "success", "message": "Staff member removed"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to remove staff {staff_id}: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to remove staff member",
            "details": str(e)
        }), 500


@staff_bp.route("/<int:staff_id>/admin", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.GRANT_STAFF_ADMIN)
def toggle_staff_admin(staff_id):
    """
    Grant or revoke staff admin
    ---
    tags:
      - Staff
    security:
      - Bearer: []
    description: Staff admins can add and remove other staff.
    parameters:
      - in: path
        name: staff_id
        type: integer
        required: true
    responses:
      200:
        description: can_add_staff toggled and role set to admin or staff
      400:
        description: Target is the owner
      404:
        description: Staff member not found
    """
    try:
        membership = membership_for_location(staff_id, g.portal.location.id)
        if not membership or membership.status == "removed":
            return jsonify({"status": "error", "message": "Staff member not found"}), 404

        if membership.role == "owner":
            return jsonify({
                "status": "error",
                "message": "The owner's permissions cannot be changed"
            }), 400

        membership.can_add_staff = not membership.can_add_staff
        membership.role = "admin" if membership.can_add_staff else "staff"
        db.session.commit()

        return jsonify({"status": "success", "staff": staff_to_dict(membership)}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to toggle admin for staff {staff_id}: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update staff member",
            "details": str(e)
        }), 500
