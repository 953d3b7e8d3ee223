"""
Access state resolution for the partner portal.

A partner moves through needs-intake -> pending -> approved|rejected as the
location row is written by the intake form and by admin review. Every guarded
request re-reads the account and its location and derives exactly one state;
nothing is cached between requests.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Optional

from flask import current_app, g, jsonify
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from portal.extensions import db
from portal.models import Account, Location, StaffMembership
from portal.permissions import resolve_capabilities
from portal.tokens import current_account


class AccessState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NEEDS_INTAKE = "needs-intake"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    # Not lifecycle states: the record is still loading, or could not be read
    INDETERMINATE = "indeterminate"
    ERROR = "error"


LIFECYCLE_STATES = frozenset(
    {
        AccessState.UNAUTHENTICATED,
        AccessState.NEEDS_INTAKE,
        AccessState.PENDING,
        AccessState.APPROVED,
        AccessState.REJECTED,
    }
)

STATE_HOME = {
    AccessState.UNAUTHENTICATED: "/login",
    AccessState.NEEDS_INTAKE: "/intake",
    AccessState.PENDING: "/pending",
    AccessState.REJECTED: "/pending",
    AccessState.APPROVED: "/",
}


@dataclass(frozen=True)
class AccessSnapshot:
    account_present: bool
    location_record_present: bool = False
    verified: bool = False
    rejected: bool = False
    loading: bool = False
    fetch_failed: bool = False


def resolve_access_state(
    snapshot: AccessSnapshot, rejection_is_terminal: bool = True
) -> AccessState:
    if snapshot.loading:
        return AccessState.INDETERMINATE
    if not snapshot.account_present:
        return AccessState.UNAUTHENTICATED
    if snapshot.fetch_failed:
        return AccessState.ERROR
    if not snapshot.location_record_present:
        return AccessState.NEEDS_INTAKE
    if snapshot.verified:
        return AccessState.APPROVED
    if snapshot.rejected and rejection_is_terminal:
        return AccessState.REJECTED
    return AccessState.PENDING


def should_redirect(state: AccessState) -> bool:
    """Callers must hold their ground while the state is unknown."""
    return state in LIFECYCLE_STATES


class LookupStatus(str, Enum):
    NOT_LOADED = "not_loaded"
    MISSING = "missing"
    FOUND = "found"
    FAILED = "failed"


@dataclass(frozen=True)
class LocationLookup:
    status: LookupStatus
    location: Optional[Location] = None
    membership: Optional[StaffMembership] = None
    error: Optional[str] = None

    @classmethod
    def not_loaded(cls):
        return cls(LookupStatus.NOT_LOADED)

    @classmethod
    def missing(cls):
        return cls(LookupStatus.MISSING)

    @classmethod
    def found(cls, location, membership=None):
        return cls(LookupStatus.FOUND, location=location, membership=membership)

    @classmethod
    def failed(cls, error):
        return cls(LookupStatus.FAILED, error=str(error))


def snapshot_for(account: Optional[Account], lookup: LocationLookup) -> AccessSnapshot:
    location = lookup.location
    return AccessSnapshot(
        account_present=account is not None,
        location_record_present=lookup.status == LookupStatus.FOUND,
        verified=bool(location is not None and location.application_approved),
        rejected=bool(location is not None and location.rejected),
        loading=account is not None and lookup.status == LookupStatus.NOT_LOADED,
        fetch_failed=lookup.status == LookupStatus.FAILED,
    )


def fetch_location_for(account: Account) -> LocationLookup:
    """The location the account owns, else the one it is active staff at."""
    try:
        owned = db.session.scalar(select(Location).where(Location.owner_id == account.id))
        if owned is not None:
            membership = db.session.scalar(
                select(StaffMembership).where(
                    StaffMembership.location_id == owned.id,
                    StaffMembership.user_id == account.id,
                )
            )
            return LocationLookup.found(owned, membership)

        membership = db.session.scalar(
            select(StaffMembership)
            .where(
                StaffMembership.user_id == account.id,
                StaffMembership.status == "active",
            )
            .order_by(StaffMembership.id)
            .limit(1)
        )
        if membership is not None:
            return LocationLookup.found(membership.location, membership)

        return LocationLookup.missing()

    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load location for user {account.id}: {e}")
        return LocationLookup.failed(e)


@dataclass
class PortalContext:
    """Everything a guarded view needs to know about the caller."""

    account: Optional[Account]
    lookup: LocationLookup
    state: AccessState
    capabilities: frozenset = field(default_factory=frozenset)

    @property
    def location(self) -> Optional[Location]:
        return self.lookup.location

    @property
    def membership(self) -> Optional[StaffMembership]:
        return self.lookup.membership

    @property
    def is_owner(self) -> bool:
        return (
            self.account is not None
            and self.location is not None
            and self.location.owner_id == self.account.id
        )

    @property
    def home_path(self) -> str:
        return STATE_HOME.get(self.state, "/")

    def can(self, capability) -> bool:
        return capability in self.capabilities


def load_portal_context() -> PortalContext:
    """Build the caller's context from fresh reads and store it on flask.g."""
    try:
        account = current_account()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load account: {e}")
        context = PortalContext(None, LocationLookup.failed(e), AccessState.ERROR)
        g.portal = context
        return context

    if account is None:
        lookup = LocationLookup.not_loaded()
    else:
        lookup = fetch_location_for(account)

    state = resolve_access_state(
        snapshot_for(account, lookup),
        rejection_is_terminal=current_app.config.get("REJECTION_IS_TERMINAL", True),
    )
    context = PortalContext(account=account, lookup=lookup, state=state)
    if lookup.location is not None:
        context.capabilities = resolve_capabilities(
            lookup.membership, is_owner=context.is_owner
        )

    g.portal = context
    return context


def access_denied(context: PortalContext):
    if context.state == AccessState.ERROR:
        return (
            jsonify(
                {
                    "status": "error",
                    "state": context.state.value,
                    "message": "Could not load your location. Please try again.",
                }
            ),
            503,
        )

    if context.state == AccessState.UNAUTHENTICATED:
        return (
            jsonify(
                {
                    "status": "error",
                    "state": context.state.value,
                    "message": "Authentication required",
                    "redirect": context.home_path,
                }
            ),
            401,
        )

    return (
        jsonify(
            {
                "status": "error",
                "state": context.state.value,
                "message": "This page is not available for your account right now",
                "redirect": context.home_path,
            }
        ),
        403,
    )


def require_state(*allowed: AccessState):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            context = load_portal_context()
            if context.state not in allowed:
                return access_denied(context)
            return view(*args, **kwargs)

        return wrapped

    return decorator


def public_only(view):
    """Login and signup are only reachable without a valid session."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        context = load_portal_context()
        if context.account is not None:
            return (
                jsonify(
                    {
                        "status": "error",
                        "state": context.state.value,
                        "message": "Already signed in",
                        "redirect": context.home_path,
                    }
                ),
                409,
            )
        return view(*args, **kwargs)

    return wrapped


def require_admin(view):
    """Admin console gate, independent of the partner lifecycle."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            account = current_account()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to load admin account: {e}")
            return jsonify({"status": "error", "message": "Failed to verify access"}), 503

        if account is None:
            return (
                jsonify(
                    {
                        "status": "error",
                        "message": "Authentication required",
                        "redirect": STATE_HOME[AccessState.UNAUTHENTICATED],
                    }
                ),
                401,
            )
        if not account.is_admin:
            return jsonify({"status": "error", "message": "Admin access required"}), 403

        g.admin = account
        return view(*args, **kwargs)

    return wrapped
