from flask import Blueprint, request, jsonify, current_app, g
from ...access import AccessState, require_state
from ...extensions import db
from ...forms import ValidationError, read_address, read_business
from ...formatting import full_address
from ...permissions import Capability, require_capability
from ...services.geocoding import geocode_address

location_details_bp = Blueprint(
    "location_details", __name__, url_prefix="/api/info"
)


def business_fields(location):
    return {
        "store_name": location.store_name,
        "phone": location.phone,
        "email": location.email,
        "website": location.website,
        "description": location.description,
    }


def address_fields(location):
    return {
        "address": location.address,
        "city": location.city,
        "state": location.state,
        "zip_code": location.zip_code,
        "full_address": full_address(
            location.address, location.city, location.state, location.zip_code
        ),
        "latitude": float(location.latitude) if location.latitude is not None else None,
        "longitude": (
            float(location.longitude) if location.longitude is not None else None
        ),
    }


@location_details_bp.route("/business", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_business_info():
    """
    Business details
    ---
    tags:
      - Location Details
    security:
      - Bearer: []
    responses:
      200:
        description: Store name, phone, email, website and description
    """
    return jsonify({"status": "success", "data": business_fields(g.portal.location)}), 200


@location_details_bp.route("/business", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.EDIT_LOCATION)
def update_business_info():
    """
    Edit business details
    ---
    tags:
      - Location Details
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [store_name]
          properties:
            store_name:
              type: string
            phone:
              type: string
            email:
              type: string
            website:
              type: string
            description:
              type: string
    responses:
      200:
        description: Business details saved
      400:
        description: Store name missing
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_business(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        for key, value in fields.items():
            setattr(location, key, value)
        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Business info updated",
            "data": business_fields(location),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update business info: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update business info",
            "details": str(e)
        }), 500


@location_details_bp.route("/address", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_address():
    """
    Street address and coordinates
    ---
    tags:
      - Location Details
    security:
      - Bearer: []
    responses:
      200:
        description: Address fields and stored coordinates
    """
    return jsonify({"status": "success", "data": address_fields(g.portal.location)}), 200


@location_details_bp.route("/address", methods=["PUT"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.EDIT_LOCATION)
def update_address():
    """
    Edit the address and refresh coordinates
    ---
    tags:
      - Location Details
    security:
      - Bearer: []
    description: >
      Coordinates are looked up after saving. A failed lookup keeps the
      previous coordinates and does not fail the request.
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            address:
              type: string
            city:
              type: string
            state:
              type: string
              maxLength: 2
            zip_code:
              type: string
              maxLength: 10
    responses:
      200:
        description: Address saved; geocoded tells whether coordinates changed
      400:
        description: State or ZIP too long
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_address(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        for key, value in fields.items():
            setattr(location, key, value)

        coordinates = geocode_address(
            fields["address"], fields["city"], fields["state"], fields["zip_code"]
        )
        if coordinates:
            location.latitude, location.longitude = coordinates

        db.session.commit()

        return jsonify({
            "status": "success",
            "message": "Address updated",
            "geocoded": coordinates is not None,
            "data": address_fields(location),
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update address: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to update address",
            "details": str(e)
        }), 500
