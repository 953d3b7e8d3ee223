from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from ..access import (
    AccessState,
    LookupStatus,
    load_portal_context,
    public_only,
    require_state,
    should_redirect,
)
from ..extensions import db
from ..models import Account
from ..serializers import owner_to_dict
from ..tokens import check_password, hash_password, issue_token

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

MIN_PASSWORD_LENGTH = 8

SIGNED_IN_STATES = (
    AccessState.NEEDS_INTAKE,
    AccessState.PENDING,
    AccessState.APPROVED,
    AccessState.REJECTED,
)


def password_error(password, confirm_password):
    if password != confirm_password:
        return "Passwords do not match"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


@auth_bp.route("/signup", methods=["POST"])
@public_only
def signup_user():
    """
    Create a partner account
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password, confirm_password]
          properties:
            email:
              type: string
            password:
              type: string
            confirm_password:
              type: string
            first_name:
              type: string
            last_name:
              type: string
            username:
              type: string
    responses:
      201:
        description: Account created, token returned
      400:
        description: Missing fields, password mismatch or email already registered
      409:
        description: Caller is already signed in
    """
    try:
        data = request.get_json(silent=True) or {}
        email = (data.get("email") or "").strip().lower()
        password = data.get("password") or ""
        confirm_password = data.get("confirm_password") or ""

        if not email or not password or not confirm_password:
            return jsonify({
                "status": "error",
                "message": "Missing required fields (email, password, confirm_password)"
            }), 400

        error = password_error(password, confirm_password)
        if error:
            return jsonify({"status": "error", "message": error}), 400

        existing = db.session.scalar(select(Account).where(Account.email == email))
        if existing:
            return jsonify({
                "status": "error",
                "message": "Email already exists"
            }), 400

        account = Account(
            email=email,
            password_hash=hash_password(password),
            username=(data.get("username") or "").strip() or None,
            first_name=(data.get("first_name") or "").strip() or None,
            last_name=(data.get("last_name") or "").strip() or None,
        )
        db.session.add(account)
        db.session.commit()
        current_app.logger.info(f"Account {account.id} signed up")

        return jsonify({
            "status": "success",
            "message": "Account created successfully",
            "token": issue_token(account),
            "user": owner_to_dict(account),
            "state": AccessState.NEEDS_INTAKE.value,
        }), 201

    except IntegrityError as e:
        db.session.rollback()
        return jsonify({
            "status": "error",
            "message": "Email or username already exists",
            "details": str(e.orig)
        }), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Signup failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/login", methods=["POST"])
@public_only
def login_user():
    """
    Sign in with email and password
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Bearer token
      400:
        description: Missing email or password
      401:
        description: Invalid credentials
    """
    try:
        data = request.get_json(silent=True) or {}
        email = (data.get("email") or "").strip().lower()
        password = data.get("password") or ""

        if not email or not password:
            return jsonify({
                "status": "error",
                "message": "Email and password required"
            }), 400

        account = db.session.scalar(select(Account).where(Account.email == email))
        if not account or not check_password(password, account.password_hash):
            return jsonify({
                "status": "error",
                "message": "Invalid credentials"
            }), 401

        return jsonify({
            "status": "success",
            "message": "Login successful",
            "token": issue_token(account)
        }), 200

    except Exception as e:
        current_app.logger.error(f"Login failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/password", methods=["PUT"])
@require_state(*SIGNED_IN_STATES)
def change_password():
    """
    Change the signed in account's password
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [current_password, new_password, confirm_password]
          properties:
            current_password:
              type: string
            new_password:
              type: string
            confirm_password:
              type: string
    responses:
      200:
        description: Password updated
      400:
        description: Validation error
      401:
        description: Current password is wrong or caller not signed in
    """
    try:
        data = request.get_json(silent=True) or {}
        current_password = data.get("current_password") or ""
        new_password = data.get("new_password") or ""
        confirm_password = data.get("confirm_password") or ""

        if not current_password or not new_password:
            return jsonify({
                "status": "error",
                "message": "Current and new password are required"
            }), 400

        error = password_error(new_password, confirm_password)
        if error:
            return jsonify({"status": "error", "message": error}), 400

        account = g.portal.account
        if not check_password(current_password, account.password_hash):
            return jsonify({
                "status": "error",
                "message": "Current password is incorrect"
            }), 401

        account.password_hash = hash_password(new_password)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Password updated successfully"
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Password change failed: {e}")
        return jsonify({
            "status": "error",
            "message": "Internal server error",
            "details": str(e)
        }), 500


@auth_bp.route("/state", methods=["GET"])
def access_state():
    """
    Resolve where the caller belongs in the partner lifecycle
    ---
    tags:
      - Auth
    responses:
      200:
        description: Current access state and the page the client should show
        schema:
          type: object
          properties:
            state:
              type: string
              enum: [unauthenticated, needs-intake, pending, approved, rejected, error]
            redirect:
              type: string
            should_redirect:
              type: boolean
    """
    context = load_portal_context()
    location = context.location

    body = {
        "status": "success",
        "state": context.state.value,
        "should_redirect": should_redirect(context.state),
        "redirect": context.home_path if should_redirect(context.state) else None,
        "user": owner_to_dict(context.account),
        "location_id": location.id if location is not None else None,
        "capabilities": sorted(c.value for c in context.capabilities),
        "is_admin": bool(context.account and context.account.is_admin),
    }
    if context.lookup.status == LookupStatus.FAILED:
        body["message"] = "Could not load your location. Please try again."
    return jsonify(body), 200
