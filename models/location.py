from datetime import datetime
from models.db import db
from models.user import new_id


class Location(db.Model):
    __tablename__ = "locations"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    school_id = db.Column(db.String(36), db.ForeignKey("schools.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)

    # stored for display only, never queried on
    latitude = db.Column(db.Numeric(10, 8), nullable=True)
    longitude = db.Column(db.Numeric(11, 8), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    school = db.relationship("School", back_populates="locations")
    hostels = db.relationship("Hostel", back_populates="location", lazy="dynamic")
