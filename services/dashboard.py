"""Role-specific dashboard summaries."""
from models.booking import BOOKING_STATUSES
from models.user import ROLES
from security.rbac import authorize
from services.store import EntityStore
from utils.serializers import booking_to_dict


def _status_counts(raw: dict) -> dict:
    return {status: raw.get(status, 0) for status in BOOKING_STATUSES}


def student_dashboard(store: EntityStore, identity) -> dict:
    recent = store.find_bookings(student_id=identity.id, limit=5)
    return {
        "role": "student",
        "bookings": _status_counts(store.booking_status_counts(student_id=identity.id)),
        "recentBookings": [booking_to_dict(b) for b in recent],
    }


def agent_dashboard(store: EntityStore, identity) -> dict:
    counts = _status_counts(store.booking_status_counts(agent_id=identity.id))
    return {
        "role": "agent",
        "verifiedStatus": identity.verified_status,
        "activeListings": store.count_hostels(agent_id=identity.id, available_only=True),
        "totalListings": store.count_hostels(agent_id=identity.id),
        "pendingBookings": counts["pending"],
        "bookings": counts,
    }


def admin_dashboard(store: EntityStore, identity) -> dict:
    by_role = store.count_users_by_role()
    return {
        "role": "admin",
        "pendingAgents": len(store.pending_agents()),
        "users": {role: by_role.get(role, 0) for role in ROLES},
        "hostels": store.count_hostels(),
        "bookings": _status_counts(store.booking_status_counts()),
    }


_BUILDERS = {
    "student": student_dashboard,
    "agent": agent_dashboard,
    "admin": admin_dashboard,
}


def dashboard_for(store: EntityStore, identity) -> dict:
    authorize(identity, _BUILDERS).raise_for_denial()
    return _BUILDERS[identity.role](store, identity)
