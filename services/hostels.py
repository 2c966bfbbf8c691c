"""Hostel listings: public search plus owner-only mutations."""
from models.hostel import Hostel
from security.rbac import authorize
from services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from services.store import EntityStore
from utils.audit import log_event

NON_NULLABLE = {"location_id", "title", "price", "price_type", "room_type", "images", "amenities", "availability"}
OPEN_BOOKING_STATES = ("pending", "confirmed")


def search_hostels(store: EntityStore, filters):
    """Available hostels matching every filter given. Price bounds are inclusive."""
    rows = store.find_hostels(
        school_id=filters.school_id,
        location_id=filters.location_id,
        price_min=filters.price_min,
        price_max=filters.price_max,
        room_type=filters.room_type,
    )
    if not filters.amenities:
        return rows

    wanted = {a.lower() for a in filters.amenities}
    return [h for h in rows if wanted <= {a.lower() for a in (h.amenities or [])}]


def get_hostel(store: EntityStore, hostel_id: str) -> Hostel:
    hostel = store.get_hostel(hostel_id)
    if hostel is None:
        raise NotFoundError("Hostel not found")
    return hostel


def _require_location(store: EntityStore, location_id: str):
    if store.get_location(location_id) is None:
        raise ValidationError("Unknown location", details={"locationId": location_id})


def create_hostel(store: EntityStore, identity, data) -> Hostel:
    authorize(identity, {"agent"}).raise_for_denial("Only verified agents can create hostels" if identity else None)
    if not identity.verified_status:
        raise AuthorizationError("Only verified agents can create hostels")

    _require_location(store, data.location_id)

    hostel = store.add(Hostel(agent_id=identity.id, **data.model_dump()))
    store.commit()

    log_event("HOSTEL_CREATE", user_id=identity.id, entity="hostel", entity_id=hostel.id)
    return hostel


def _owned(store: EntityStore, identity, hostel_id: str) -> Hostel:
    authorize(identity, {"agent", "admin"}).raise_for_denial()
    hostel = get_hostel(store, hostel_id)
    authorize(identity, {"agent", "admin"}, resource_owner_id=hostel.agent_id).raise_for_denial()
    return hostel


def update_hostel(store: EntityStore, identity, hostel_id: str, data) -> Hostel:
    hostel = _owned(store, identity, hostel_id)

    changes = data.model_dump(include=data.model_fields_set)
    cleared = sorted(name for name, value in changes.items() if value is None and name in NON_NULLABLE)
    if cleared:
        raise ValidationError("Fields cannot be null", details=cleared)
    if "location_id" in changes:
        _require_location(store, changes["location_id"])

    for name, value in changes.items():
        setattr(hostel, name, value)
    store.commit()

    log_event("HOSTEL_UPDATE", user_id=identity.id, entity="hostel", entity_id=hostel.id,
              metadata={"fields": sorted(changes)})
    return hostel


def delete_hostel(store: EntityStore, identity, hostel_id: str):
    hostel = _owned(store, identity, hostel_id)

    if store.count_bookings(hostel_id=hostel.id, statuses=OPEN_BOOKING_STATES):
        raise ConflictError("Hostel has open inspection bookings")
    if store.count_bookings(hostel_id=hostel.id):
        # keep history intact; closed bookings still reference the hostel
        raise ConflictError("Hostel has booking history; mark it unavailable instead")

    store.delete(hostel)
    store.commit()
    log_event("HOSTEL_DELETE", user_id=identity.id, entity="hostel", entity_id=hostel_id)


def list_agent_hostels(store: EntityStore, identity):
    authorize(identity, {"agent"}).raise_for_denial()
    return store.hostels_by_agent(identity.id)
