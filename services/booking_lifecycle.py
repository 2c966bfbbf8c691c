"""Inspection booking lifecycle.

A booking starts ``pending`` and moves through a fixed transition table.
Only two parties may touch it: the student who made it and the agent who
owns the hostel. The student can only withdraw; the agent drives the rest.
"""
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from models.booking import Booking
from security.rbac import authorize
from services import notifications
from services.errors import (
    AuthorizationError,
    ConflictError,
    IllegalTransition,
    NotFoundError,
    ValidationError,
)
from services.store import EntityStore
from utils.audit import log_event

TRANSITIONS = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "cancelled": frozenset(),
    "completed": frozenset(),
}

TERMINAL = frozenset(state for state, targets in TRANSITIONS.items() if not targets)

# which target states each party may request
ACTOR_TARGETS = {
    "student": frozenset({"cancelled"}),
    "agent": frozenset({"confirmed", "completed", "cancelled"}),
}


def can_transition(current: str, requested: str) -> bool:
    return requested in TRANSITIONS.get(current, frozenset())


def _load(store: EntityStore, booking_id: str) -> Booking:
    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


def _party(identity, booking: Booking) -> str:
    """Returns "student" or "agent", or raises if the caller is neither party."""
    authorize(identity, {"student", "agent"}).raise_for_denial()

    owner_id = booking.student_id if identity.role == "student" else booking.hostel.agent_id
    if not authorize(identity, {identity.role}, resource_owner_id=owner_id).allowed:
        raise AuthorizationError("Not authorized")
    return identity.role


def _check_replay(existing: Booking, hostel_id: str):
    if existing.hostel_id != hostel_id:
        raise ConflictError(
            "Idempotency-Key was already used for a different hostel",
            details={"hostelId": existing.hostel_id},
        )


def create_booking(
    store: EntityStore,
    identity,
    hostel_id: str,
    preferred_date,
    preferred_time: str,
    message: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> Tuple[Booking, bool]:
    """Returns (booking, created). created is False for an idempotent replay."""
    decision = authorize(identity, {"student"})
    decision.raise_for_denial("Only students can create bookings" if identity else None)

    if idempotency_key:
        existing = store.find_booking_by_key(identity.id, idempotency_key)
        if existing is not None:
            _check_replay(existing, hostel_id)
            return existing, False

    hostel = store.get_hostel(hostel_id)
    if hostel is None:
        raise NotFoundError("Hostel not found")
    if not hostel.availability:
        raise ConflictError("Hostel is not available for inspection")

    booking = store.add(Booking(
        student_id=identity.id,
        hostel_id=hostel.id,
        preferred_date=preferred_date,
        preferred_time=preferred_time,
        message=message,
        status="pending",
        idempotency_key=idempotency_key,
    ))
    try:
        store.flush()
    except IntegrityError:
        # a concurrent request with the same key won the insert
        store.rollback()
        existing = store.find_booking_by_key(identity.id, idempotency_key) if idempotency_key else None
        if existing is None:
            raise
        _check_replay(existing, hostel_id)
        return existing, False

    notifications.queue_booking_created(store, booking, hostel, store.get_user(identity.id))
    store.commit()

    log_event("BOOKING_CREATE", user_id=identity.id, entity="booking", entity_id=booking.id,
              metadata={"hostel_id": hostel.id})
    return booking, True


def update_booking(store: EntityStore, identity, booking_id: str, patch) -> Booking:
    """Apply a BookingPatch on behalf of one of the booking's two parties."""
    booking = _load(store, booking_id)
    party = _party(identity, booking)

    changes = {}
    requested = patch.status if "status" in patch.model_fields_set else None
    if requested is not None and requested != booking.status:
        if requested not in ACTOR_TARGETS[party]:
            raise AuthorizationError(f"A {party} cannot set a booking to {requested}")
        if not can_transition(booking.status, requested):
            raise IllegalTransition(booking.status, requested)
        changes["status"] = (booking.status, requested)

    reschedule = patch.reschedule_fields
    if reschedule:
        if party != "student":
            raise AuthorizationError("Only the student can change the inspection details")
        if booking.status != "pending" or "status" in changes:
            raise ConflictError("Only pending bookings can be rescheduled")
        for name in ("preferred_date", "preferred_time"):
            if name in reschedule and reschedule[name] is None:
                raise ValidationError(f"{name} cannot be cleared")

    for name, value in reschedule.items():
        setattr(booking, name, value)
    if "status" in changes:
        booking.status = changes["status"][1]
        # notify whoever did not make the change
        recipient = booking.hostel.agent if party == "student" else booking.student
        if recipient is not None and booking.status in ("confirmed", "cancelled"):
            notifications.queue_status_changed(store, booking, recipient)

    store.commit()

    if changes or reschedule:
        log_event(
            "BOOKING_UPDATE",
            user_id=identity.id,
            entity="booking",
            entity_id=booking.id,
            metadata={
                "status": list(changes["status"]) if "status" in changes else None,
                "fields": sorted(reschedule),
            },
        )
    return booking


def get_booking(store: EntityStore, identity, booking_id: str) -> Booking:
    booking = _load(store, booking_id)
    if identity is not None and identity.is_admin:
        return booking
    _party(identity, booking)
    return booking


def list_bookings(store: EntityStore, identity, status: Optional[str] = None):
    authorize(identity, {"student", "agent", "admin"}).raise_for_denial()
    if identity.role == "student":
        return store.find_bookings(student_id=identity.id, status=status)
    if identity.role == "agent":
        return store.find_bookings(agent_id=identity.id, status=status)
    return store.find_bookings(status=status)
