"""Entity store: the single persistence seam the services talk to.

An ``EntityStore`` wraps one SQLAlchemy session. Routes build one per request
with ``get_store()`` and hand it to the service functions, so tests can pass
a store bound to any session they like.
"""
from typing import Iterable, List, Optional

from flask import g
from sqlalchemy import func

from models import db
from models.booking import Booking
from models.hostel import Hostel
from models.location import Location
from models.notification import Notification
from models.school import School
from models.user import User


class EntityStore:
    def __init__(self, session):
        self.session = session

    # ---------- unit of work ----------
    def add(self, obj):
        self.session.add(obj)
        return obj

    def delete(self, obj):
        self.session.delete(obj)

    def flush(self):
        self.session.flush()

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

    # ---------- credentials / users ----------
    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.session.query(User).filter_by(email=email).first()

    def pending_agents(self) -> List[User]:
        return (
            self.session.query(User)
            .filter(User.role == "agent", User.verified_status.is_(False))
            .order_by(User.created_at.asc())
            .all()
        )

    def count_users_by_role(self) -> dict:
        rows = self.session.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

    # ---------- schools / locations ----------
    def list_schools(self) -> List[School]:
        return self.session.query(School).order_by(School.name.asc()).all()

    def get_school(self, school_id: str) -> Optional[School]:
        return self.session.get(School, school_id)

    def list_locations(self, school_id: str) -> List[Location]:
        return (
            self.session.query(Location)
            .filter_by(school_id=school_id)
            .order_by(Location.name.asc())
            .all()
        )

    def get_location(self, location_id: str) -> Optional[Location]:
        return self.session.get(Location, location_id)

    # ---------- hostels ----------
    def get_hostel(self, hostel_id: str) -> Optional[Hostel]:
        return self.session.get(Hostel, hostel_id)

    def find_hostels(
        self,
        school_id: Optional[str] = None,
        location_id: Optional[str] = None,
        price_min: Optional[int] = None,
        price_max: Optional[int] = None,
        room_type: Optional[str] = None,
        available_only: bool = True,
    ) -> List[Hostel]:
        q = self.session.query(Hostel)
        if available_only:
            q = q.filter(Hostel.availability.is_(True))
        if school_id:
            q = q.join(Location, Hostel.location_id == Location.id).filter(Location.school_id == school_id)
        if location_id:
            q = q.filter(Hostel.location_id == location_id)
        if price_min is not None:
            q = q.filter(Hostel.price >= price_min)
        if price_max is not None:
            q = q.filter(Hostel.price <= price_max)
        if room_type:
            q = q.filter(Hostel.room_type == room_type)
        return q.order_by(Hostel.created_at.desc()).all()

    def hostels_by_agent(self, agent_id: str) -> List[Hostel]:
        return (
            self.session.query(Hostel)
            .filter_by(agent_id=agent_id)
            .order_by(Hostel.created_at.desc())
            .all()
        )

    def count_hostels(self, agent_id: Optional[str] = None, available_only: bool = False) -> int:
        q = self.session.query(Hostel)
        if agent_id:
            q = q.filter(Hostel.agent_id == agent_id)
        if available_only:
            q = q.filter(Hostel.availability.is_(True))
        return q.count()

    # ---------- bookings ----------
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.session.get(Booking, booking_id)

    def find_booking_by_key(self, student_id: str, idempotency_key: str) -> Optional[Booking]:
        return (
            self.session.query(Booking)
            .filter_by(student_id=student_id, idempotency_key=idempotency_key)
            .first()
        )

    def _booking_query(self, student_id=None, agent_id=None, statuses: Optional[Iterable[str]] = None):
        q = self.session.query(Booking)
        if student_id:
            q = q.filter(Booking.student_id == student_id)
        if agent_id:
            q = q.join(Hostel, Booking.hostel_id == Hostel.id).filter(Hostel.agent_id == agent_id)
        if statuses:
            q = q.filter(Booking.status.in_(list(statuses)))
        return q

    def find_bookings(
        self,
        student_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        status: Optional[str] = None,
        hostel_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Booking]:
        q = self._booking_query(student_id, agent_id, [status] if status else None)
        if hostel_id:
            q = q.filter(Booking.hostel_id == hostel_id)
        q = q.order_by(Booking.created_at.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def count_bookings(self, student_id=None, agent_id=None, hostel_id=None, statuses=None) -> int:
        q = self._booking_query(student_id, agent_id, statuses)
        if hostel_id:
            q = q.filter(Booking.hostel_id == hostel_id)
        return q.count()

    def booking_status_counts(self, student_id=None, agent_id=None) -> dict:
        q = self._booking_query(student_id, agent_id).with_entities(Booking.status, func.count(Booking.id))
        return {status: count for status, count in q.group_by(Booking.status).all()}

    # ---------- notifications ----------
    def queued_notifications(self, limit: int) -> List[Notification]:
        return (
            self.session.query(Notification)
            .filter_by(status="QUEUED")
            .order_by(Notification.created_at.asc(), Notification.id.asc())
            .limit(limit)
            .all()
        )


def get_store() -> EntityStore:
    """Per-request store bound to the Flask-SQLAlchemy scoped session."""
    store = getattr(g, "store", None)
    if store is None:
        store = EntityStore(db.session)
        g.store = store
    return store
