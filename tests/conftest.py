from datetime import date, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db, Booking, Hostel, Location, School, User
from security.password import hash_password

PASSWORD = "correct-horse-9"


class Factory:
    """Writes fixtures straight to the database and hands back ids."""

    def __init__(self, app):
        self.app = app

    def _save(self, obj):
        with self.app.app_context():
            db.session.add(obj)
            db.session.commit()
            return obj.id

    def user(self, email, role="student", verified=False, password=PASSWORD, first_name="Test"):
        with self.app.app_context():
            pw_hash = hash_password(password)
        return self._save(User(
            email=email,
            password_hash=pw_hash,
            first_name=first_name,
            role=role,
            verified_status=verified,
        ))

    def school(self, name="University of Lagos", city="Lagos", state="Lagos"):
        return self._save(School(name=name, city=city, state=state))

    def location(self, school_id, name="Akoka"):
        return self._save(Location(school_id=school_id, name=name))

    def hostel(self, agent_id, location_id, **overrides):
        fields = {
            "title": "Sunrise Lodge",
            "price": 150000,
            "price_type": "semester",
            "room_type": "single",
            "amenities": ["wifi"],
            "images": [],
            "availability": True,
        }
        fields.update(overrides)
        return self._save(Hostel(agent_id=agent_id, location_id=location_id, **fields))

    def booking(self, student_id, hostel_id, status="pending"):
        return self._save(Booking(
            student_id=student_id,
            hostel_id=hostel_id,
            preferred_date=date.today() + timedelta(days=3),
            preferred_time="10:00",
            status=status,
        ))

    def get(self, model, obj_id):
        with self.app.app_context():
            obj = db.session.get(model, obj_id)
            if obj is not None:
                db.session.expunge(obj)
            return obj


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def factory(app):
    return Factory(app)


@pytest.fixture
def login(app):
    """Log in on a throwaway client and return Bearer headers for the session."""
    def _login(email, password=PASSWORD):
        resp = app.test_client().post("/api/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}
    return _login


@pytest.fixture
def world(factory):
    """One school/location, a verified agent with a listing, two students, an admin."""
    school_id = factory.school()
    location_id = factory.location(school_id)
    agent_id = factory.user("agent@example.com", role="agent", verified=True)
    other_agent_id = factory.user("agent2@example.com", role="agent", verified=True)
    student_id = factory.user("student@example.com")
    other_student_id = factory.user("student2@example.com")
    admin_id = factory.user("admin@example.com", role="admin")
    hostel_id = factory.hostel(agent_id, location_id)
    return {
        "school_id": school_id,
        "location_id": location_id,
        "agent_id": agent_id,
        "other_agent_id": other_agent_id,
        "student_id": student_id,
        "other_student_id": other_student_id,
        "admin_id": admin_id,
        "hostel_id": hostel_id,
    }
