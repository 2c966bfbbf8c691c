from datetime import datetime
from models.db import db
from models.user import new_id

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    student_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    hostel_id = db.Column(db.String(36), db.ForeignKey("hostels.id"), nullable=False, index=True)

    preferred_date = db.Column(db.Date, nullable=True)
    preferred_time = db.Column(db.String(20), nullable=True)
    message = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)

    idempotency_key = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = db.relationship("User", back_populates="bookings")
    hostel = db.relationship("Hostel", back_populates="bookings")

    __table_args__ = (
        # a replayed create from the same student resolves to the first booking
        db.UniqueConstraint("student_id", "idempotency_key", name="uq_booking_student_idempotency_key"),
    )
