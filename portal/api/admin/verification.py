# Admin review of location applications
from flask import Blueprint, jsonify, request, current_app, g
from portal.access import require_admin
from portal.extensions import db
from portal.models import Location
from portal.serializers import application_status, application_to_dict
from portal.utils.timestamps import utcnow
from sqlalchemy import select

admin_verification_bp = Blueprint(
    "admin_verification", __name__, url_prefix="/api/admin/applications"
)

STATUS_FILTERS = {
    "pending": (
        Location.application_approved.is_(False),
        Location.rejected.is_(False),
    ),
    "approved": (Location.application_approved.is_(True),),
    "rejected": (
        Location.application_approved.is_(False),
        Location.rejected.is_(True),
    ),
    "all": (),
}


def pending_or_conflict(location):
    status = application_status(location)
    if status != "pending":
        return (
            jsonify(
                {
                    "status": "error",
                    "message": f"Application is already {status}",
                    "application_status": status,
                }
            ),
            409,
        )
    return None


def invalid_notes(data):
    notes = data.get("admin_notes")
    if notes is not None and not isinstance(notes, str):
        return (
            jsonify({"status": "error", "message": "admin_notes must be text"}),
            400,
        )
    return None


def clean_notes(notes):
    return (notes or "").strip() or None


@admin_verification_bp.route("", methods=["GET"])
@require_admin
def list_applications():
    """
    GET /api/admin/applications - Location applications for review

    ---
    tags:
      - Admin
    summary: Retrieve location applications for admin review
    parameters:
      - name: status
        in: query
        type: string
        enum: [pending, approved, rejected, all]
        required: false
        description: Filter by review status (default pending)
    responses:
      200:
        description: Applications, newest submission first, with owner details
      400:
        description: Unknown status filter
      500:
        description: Database error
    """
    try:
        status_filter = request.args.get("status", "pending").lower()
        if status_filter not in STATUS_FILTERS:
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": "Invalid status. Must be pending, approved, rejected or all",
                    }
                ),
                400,
            )

        locations = db.session.scalars(
            select(Location)
            .where(*STATUS_FILTERS[status_filter])
            .order_by(Location.submitted_at.desc(), Location.id.desc())
        ).all()

        return (
            jsonify(
                {
                    "status": "success",
                    "filter": status_filter,
                    "applications": [
                        application_to_dict(
                            loc, include_owner=True, include_admin_fields=True
                        )
                        for loc in locations
                    ],
                }
            ),
            200,
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to fetch applications: {e}")
        return (
            jsonify(
                {
                    "status": "error",
                    "message": "Failed to fetch applications",
                    "details": str(e),
                }
            ),
            500,
        )


@admin_verification_bp.route("/<int:location_id>", methods=["GET"])
@require_admin
def get_application(location_id):
    """
    GET /api/admin/applications/<location_id> - One application
    ---
    tags:
      - Admin
    parameters:
      - name: location_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Application with owner and review details
      404:
        description: Application not found
    """
    try:
        location = db.session.get(Location, location_id)
        if not location:
            return jsonify({"status": "error", "message": "Application not found"}), 404

        return (
            jsonify(
                {
                    "status": "success",
                    "application": application_to_dict(
                        location, include_owner=True, include_admin_fields=True
                    ),
                }
            ),
            200,
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to fetch application {location_id}: {e}")
        return (
            jsonify(
                {
                    "status": "error",
                    "message": "Failed to fetch application",
                    "details": str(e),
                }
            ),
            500,
        )


@admin_verification_bp.route("/<int:location_id>/approve", methods=["POST"])
@require_admin
def approve_application(location_id):
    """
    POST /api/admin/applications/<location_id>/approve - Approve a pending application
    ---
    tags:
      - Admin
    parameters:
      - name: location_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: false
        schema:
          type: object
          properties:
            admin_notes:
              type: string
    responses:
      200:
        description: Location approved and verified
      404:
        description: Application not found
      409:
        description: Application is not pending
    """
    try:
        data = request.get_json(silent=True) or {}
        bad_notes = invalid_notes(data)
        if bad_notes:
            return bad_notes

        location = db.session.get(Location, location_id)
        if not location:
            return jsonify({"status": "error", "message": "Application not found"}), 404

        conflict = pending_or_conflict(location)
        if conflict:
            return conflict

        location.application_approved = True
        location.verified = True
        location.rejected = False
        location.rejection_reason = None
        if "admin_notes" in data:
            location.admin_notes = clean_notes(data.get("admin_notes"))
        location.reviewed_at = utcnow()
        location.reviewed_by = g.admin.id
        db.session.commit()
        current_app.logger.info(
            f"Location {location.id} approved by admin {g.admin.id}"
        )

        return (
            jsonify(
                {
                    "status": "success",
                    "message": "Application approved",
                    "application": application_to_dict(
                        location, include_owner=True, include_admin_fields=True
                    ),
                }
            ),
            200,
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to approve application {location_id}: {e}")
        return (
            jsonify(
                {
                    "status": "error",
                    "message": "Failed to approve application",
                    "details": str(e),
                }
            ),
            500,
        )


@admin_verification_bp.route("/<int:location_id>/reject", methods=["POST"])
@require_admin
def reject_application(location_id):
    """
    POST /api/admin/applications/<location_id>/reject - Reject a pending application
    ---
    tags:
      - Admin
    parameters:
      - name: location_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [rejection_reason]
          properties:
            rejection_reason:
              type: string
              description: Shown to the applicant exactly as written
            admin_notes:
              type: string
    responses:
      200:
        description: Application rejected
      400:
        description: Rejection reason missing
      404:
        description: Application not found
      409:
        description: Application is not pending
    """
    try:
        data = request.get_json(silent=True) or {}
        reason = data.get("rejection_reason")
        if not isinstance(reason, str) or not reason.strip():
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": "Please provide a reason for rejection",
                    }
                ),
                400,
            )
        bad_notes = invalid_notes(data)
        if bad_notes:
            return bad_notes

        location = db.session.get(Location, location_id)
        if not location:
            return jsonify({"status": "error", "message": "Application not found"}), 404

        conflict = pending_or_conflict(location)
        if conflict:
            return conflict

        location.rejected = True
        location.verified = False
        location.application_approved = False
        location.rejection_reason = reason
        if "admin_notes" in data:
            location.admin_notes = clean_notes(data.get("admin_notes"))
        location.reviewed_at = utcnow()
        location.reviewed_by = g.admin.id
        db.session.commit()
        current_app.logger.info(
            f"Location {location.id} rejected by admin {g.admin.id}"
        )

        return (
            jsonify(
                {
                    "status": "success",
                    "message": "Application rejected",
                    "application": application_to_dict(
                        location, include_owner=True, include_admin_fields=True
                    ),
                }
            ),
            200,
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to reject application {location_id}: {e}")
        return (
            jsonify(
                {
                    "status": "error",
                    "message": "Failed to reject application",
                    "details": str(e),
                }
            ),
            500,
        )


@admin_verification_bp.route("/<int:location_id>/notes", methods=["PUT"])
@require_admin
def update_notes(location_id):
    """
    PUT /api/admin/applications/<location_id>/notes - Internal review notes
    ---
    tags:
      - Admin
    parameters:
      - name: location_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            admin_notes:
              type: string
    responses:
      200:
        description: Notes saved
      400:
        description: admin_notes is not text
      404:
        description: Application not found
    """
    try:
        data = request.get_json(silent=True) or {}
        bad_notes = invalid_notes(data)
        if bad_notes:
            return bad_notes

        location = db.session.get(Location, location_id)
        if not location:
            return jsonify({"status": "error", "message": "Application not found"}), 404

        location.admin_notes = clean_notes(data.get("admin_notes"))
        db.session.commit()

        return (
            jsonify({"status": "success", "admin_notes": location.admin_notes}),
            200,
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to save notes for {location_id}: {e}")
        return (
            jsonify(
                {
                    "status": "error",
                    "message": "Failed to save notes",
                    "details": str(e),
                }
            ),
            500,
        )
