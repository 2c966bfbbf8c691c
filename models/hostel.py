from datetime import datetime
from models.db import db
from models.user import new_id

PRICE_TYPES = ("semester", "year")
ROOM_TYPES = ("single", "shared", "self-contain")


class Hostel(db.Model):
    __tablename__ = "hostels"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    agent_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    location_id = db.Column(db.String(36), db.ForeignKey("locations.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    price = db.Column(db.Integer, nullable=False)  # whole naira, no minor units
    price_type = db.Column(db.String(20), nullable=False, default="semester")
    room_type = db.Column(db.String(20), nullable=False)

    images = db.Column(db.JSON, nullable=False, default=list)
    amenities = db.Column(db.JSON, nullable=False, default=list)

    # sole gate for listing visibility
    availability = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    agent = db.relationship("User", back_populates="hostels")
    location = db.relationship("Location", back_populates="hostels")
    bookings = db.relationship("Booking", back_populates="hostel", lazy="dynamic")
