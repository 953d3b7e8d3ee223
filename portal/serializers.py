from portal.formatting import (
    event_subtitle,
    format_time_24,
    full_address,
    to_12_hour,
)
from portal.plans import plan_for_tier
from portal.utils.timestamps import isoformat_or_none


def application_status(location) -> str:
    if location.application_approved:
        return "approved"
    if location.rejected:
        return "rejected"
    return "pending"


def owner_to_dict(account):
    if account is None:
        return None
    return {
        "id": account.id,
        "email": account.email,
        "username": account.username,
        "first_name": account.first_name,
        "last_name": account.last_name,
    }


def location_to_dict(location):
    plan = plan_for_tier(location.subscription_tier) or {}
    return {
        "id": location.id,
        "store_name": location.store_name,
        "phone": location.phone,
        "email": location.email,
        "website": location.website,
        "description": location.description,
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
        "subscription_tier": location.subscription_tier,
        "subscription_status": location.subscription_status,
        "plan_name": plan.get("name"),
        "visible_on_app": bool(location.visible_on_app),
        "verified": bool(location.verified),
    }


def application_to_dict(location, include_owner=False, include_admin_fields=False):
    data = {
        "id": location.id,
        "store_name": location.store_name,
        "phone": location.phone,
        "address": location.address,
        "city": location.city,
        "state": location.state,
        "zip_code": location.zip_code,
        "website": location.website,
        "description": location.description,
        "status": application_status(location),
        "rejection_reason": location.rejection_reason if location.rejected else None,
        "submitted_at": isoformat_or_none(location.submitted_at),
        "application_updated_at": isoformat_or_none(location.application_updated_at),
        "reviewed_at": isoformat_or_none(location.reviewed_at),
    }
    if include_owner:
        data["owner"] = owner_to_dict(location.owner)
    if include_admin_fields:
        data["admin_notes"] = location.admin_notes
        data["reviewed_by"] = location.reviewed_by
    return data


def staff_to_dict(membership):
    return {
        "id": membership.id,
        "user_id": membership.user_id,
        "role": membership.role,
        "can_add_staff": bool(membership.can_add_staff),
        "status": membership.status,
        "invited_at": isoformat_or_none(membership.invited_at),
        "accepted_at": isoformat_or_none(membership.accepted_at),
        "user": owner_to_dict(membership.user),
    }


def event_to_dict(event, active=True):
    return {
        "id": event.id,
        "name": event.name,
        "category": event.category,
        "day": event.recurrence_day,
        "start_time": format_time_24(event.start_time),
        "end_time": format_time_24(event.end_time),
        "subtitle": event_subtitle(
            event.recurrence_day, event.start_time, event.end_time
        ),
        "active": active,
    }


def blocked_to_dict(block):
    return {
        "id": block.id,
        "date": block.date.isoformat(),
        "all_day": bool(block.all_day),
        "start_time": format_time_24(block.start_time) if block.start_time else None,
        "end_time": format_time_24(block.end_time) if block.end_time else None,
        "reason": block.reason,
    }


def trade_to_dict(schedule):
    request = schedule.trade_request
    return {
        "id": schedule.id,
        "trade_request_id": schedule.trade_request_id,
        "date": schedule.selected_date.isoformat(),
        "time": schedule.selected_time,
        "time_label": (
            to_12_hour(schedule.selected_time) if schedule.selected_time else "TBD"
        ),
        "status": schedule.status,
        "cancelled_at": isoformat_or_none(schedule.cancelled_at),
        "card_name": request.card_name if request else None,
        "card_image_url": request.card_image_url if request else None,
        "requester": owner_to_dict(request.requester) if request else None,
        "card_owner": owner_to_dict(request.card_owner) if request else None,
    }
