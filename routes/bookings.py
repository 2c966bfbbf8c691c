from flask import Blueprint, jsonify, g, request

from schemas import parse_args, parse_body
from schemas.booking import BookingCreate, BookingListQuery, BookingPatch
from security.rbac import require_roles
from services import booking_lifecycle
from services.errors import ValidationError
from services.store import get_store
from utils.auth_context import login_required
from utils.serializers import booking_to_dict

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")

IDEMPOTENCY_HEADER = "Idempotency-Key"


def _idempotency_key():
    key = (request.headers.get(IDEMPOTENCY_HEADER) or "").strip()
    if len(key) > 128:
        raise ValidationError(f"{IDEMPOTENCY_HEADER} must be at most 128 characters")
    return key or None


# ---------- any signed-in party: bookings scoped to the caller ----------
@bookings_bp.get("")
@login_required
def list_bookings():
    query = parse_args(BookingListQuery)
    rows = booking_lifecycle.list_bookings(get_store(), g.identity, status=query.status)
    return jsonify([booking_to_dict(b) for b in rows]), 200


@bookings_bp.get("/<string:booking_id>")
@login_required
def get_booking(booking_id: str):
    booking = booking_lifecycle.get_booking(get_store(), g.identity, booking_id)
    return jsonify(booking_to_dict(booking)), 200


# ---------- STUDENTS: request an inspection ----------
@bookings_bp.post("")
@require_roles("student")
def create_booking():
    data = parse_body(BookingCreate)
    booking, created = booking_lifecycle.create_booking(
        get_store(),
        g.identity,
        hostel_id=data.hostel_id,
        preferred_date=data.preferred_date,
        preferred_time=data.preferred_time,
        message=data.message,
        idempotency_key=_idempotency_key(),
    )
    return jsonify(booking_to_dict(booking)), 201 if created else 200


# ---------- student-owner or owning agent: move the booking along ----------
@bookings_bp.patch("/<string:booking_id>")
@login_required
def update_booking(booking_id: str):
    patch = parse_body(BookingPatch)
    booking = booking_lifecycle.update_booking(get_store(), g.identity, booking_id, patch)
    return jsonify(booking_to_dict(booking)), 200
