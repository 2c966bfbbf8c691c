import uuid
from datetime import datetime
from models.db import db

ROLES = ("student", "agent", "admin")


def new_id() -> str:
    return str(uuid.uuid4())


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    # stored normalized (stripped + lower-cased)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=True)
    profile_image_url = db.Column(db.String(512), nullable=True)

    role = db.Column(db.String(20), nullable=False, default="student", index=True)
    # only meaningful for agents; flipped by an admin
    verified_status = db.Column(db.Boolean, default=False, nullable=False)
    business_reg_number = db.Column(db.String(64), nullable=True)

    school_id = db.Column(db.String(36), db.ForeignKey("schools.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    school = db.relationship("School", back_populates="users")
    hostels = db.relationship("Hostel", back_populates="agent", lazy="dynamic")
    bookings = db.relationship("Booking", back_populates="student", lazy="dynamic")
