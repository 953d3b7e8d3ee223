"""Staff capabilities, resolved once per request from the caller's membership."""

from enum import Enum
from functools import wraps

from flask import g, jsonify


class Capability(str, Enum):
    VIEW_LOCATION = "view_location"
    EDIT_LOCATION = "edit_location"
    MANAGE_STAFF = "manage_staff"
    GRANT_STAFF_ADMIN = "grant_staff_admin"
    MANAGE_PLAN = "manage_plan"
    MANAGE_SCHEDULE = "manage_schedule"


OWNER_CAPABILITIES = frozenset(Capability)
STAFF_ADMIN_CAPABILITIES = frozenset(
    {
        Capability.VIEW_LOCATION,
        Capability.EDIT_LOCATION,
        Capability.MANAGE_STAFF,
        Capability.MANAGE_SCHEDULE,
    }
)
STAFF_CAPABILITIES = frozenset({Capability.VIEW_LOCATION, Capability.MANAGE_SCHEDULE})


def resolve_capabilities(membership=None, is_owner: bool = False) -> frozenset:
    if is_owner:
        return OWNER_CAPABILITIES
    if membership is None or membership.status != "active":
        return frozenset()
    if membership.role == "owner":
        return OWNER_CAPABILITIES
    if membership.role == "admin" or membership.can_add_staff:
        return STAFF_ADMIN_CAPABILITIES
    return STAFF_CAPABILITIES


def require_capability(capability: Capability):
    """Must be applied inside a lifecycle guard, which populates g.portal."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            portal = getattr(g, "portal", None)
            if portal is None or capability not in portal.capabilities:
                return (
                    jsonify(
                        {
                            "status": "error",
                            "message": "You don't have permission to do that",
                            "required": capability.value,
                        }
                    ),
                    403,
                )
            return view(*args, **kwargs)

        return wrapped

    return decorator
