"""
Swagger/OpenAPI configuration for the CardChase Location Portal API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "CardChase Location Portal API",
        "description": "Partner portal for trading card stores: application intake and review, store details, hours, plans, staff, weekly events and the trade schedule",
        "contact": {"email": "partners@cardchase.app"},
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Auth", "description": "Sign up, sign in and access state"},
        {"name": "Application", "description": "Intake form and pending review"},
        {"name": "Location", "description": "Dashboard and visibility"},
        {"name": "Location Details", "description": "Business info and address"},
        {"name": "Operating Hours", "description": "Weekly opening hours"},
        {"name": "Plans", "description": "Subscription tiers"},
        {"name": "Staff", "description": "Staff members and permissions"},
        {"name": "Events", "description": "Weekly recurring events"},
        {"name": "Schedule", "description": "Trade schedule and blocked times"},
        {"name": "Admin", "description": "Application review console"},
        {"name": "Utility", "description": "Service status"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "message": {"type": "string"},
                "details": {"type": "string"},
            },
        },
        "AccessDenied": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "state": {
                    "type": "string",
                    "enum": [
                        "unauthenticated",
                        "needs-intake",
                        "pending",
                        "approved",
                        "rejected",
                        "error",
                    ],
                },
                "message": {"type": "string"},
                "redirect": {"type": "string", "example": "/pending"},
            },
        },
        "Success": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "success"},
                "message": {"type": "string"},
            },
        },
        "Location": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "store_name": {"type": "string"},
                "phone": {"type": "string"},
                "email": {"type": "string"},
                "website": {"type": "string"},
                "description": {"type": "string"},
                "address": {"type": "string"},
                "city": {"type": "string"},
                "state": {"type": "string"},
                "zip_code": {"type": "string"},
                "latitude": {"type": "number", "format": "float"},
                "longitude": {"type": "number", "format": "float"},
                "subscription_tier": {"type": "integer"},
                "subscription_status": {"type": "string", "enum": ["free", "active"]},
                "visible_on_app": {"type": "boolean"},
                "verified": {"type": "boolean"},
            },
        },
        "Application": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "store_name": {"type": "string"},
                "status": {
                    "type": "string",
                    "enum": ["pending", "approved", "rejected"],
                },
                "rejection_reason": {"type": "string"},
                "submitted_at": {"type": "string", "format": "date-time"},
                "application_updated_at": {"type": "string", "format": "date-time"},
                "reviewed_at": {"type": "string", "format": "date-time"},
            },
        },
        "Event": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string", "example": "Trade Night"},
                "category": {
                    "type": "string",
                    "enum": ["trade", "tournament", "card_show"],
                },
                "day": {"type": "string", "example": "Friday"},
                "start_time": {"type": "string", "example": "18:00"},
                "end_time": {"type": "string", "example": "21:00"},
                "subtitle": {
                    "type": "string",
                    "example": "Fridays, 6:00 PM - 9:00 PM",
                },
                "active": {"type": "boolean"},
            },
        },
        "Trade": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "date": {"type": "string", "format": "date"},
                "time": {"type": "string", "example": "14:30"},
                "time_label": {"type": "string", "example": "2:30 PM"},
                "status": {"type": "string", "enum": ["confirmed", "cancelled"]},
                "card_name": {"type": "string"},
            },
        },
    },
}
