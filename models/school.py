from datetime import datetime
from models.db import db
from models.user import new_id


class School(db.Model):
    __tablename__ = "schools"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    state = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    users = db.relationship("User", back_populates="school")
    locations = db.relationship("Location", back_populates="school", order_by="Location.name")
