from datetime import datetime
from models.db import db


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)

    recipient_email = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    reply_to = db.Column(db.String(255), nullable=True)

    booking_id = db.Column(db.String(36), db.ForeignKey("bookings.id"), nullable=True, index=True)

    status = db.Column(db.String(20), nullable=False, default="QUEUED", index=True)
    attempts = db.Column(db.Integer, default=0, nullable=False)
    last_error = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=True)
