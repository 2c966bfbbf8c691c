"""Outbox for email notifications.

Rows are queued inside the caller's transaction and delivered later by
``deliver_pending`` (``flask send-notifications``). A delivery failure never
undoes the booking change that queued it.
"""
import logging
from datetime import datetime

from flask import current_app

from models.notification import Notification
from services.store import EntityStore
from utils.emailer import send_email

logger = logging.getLogger("hostelhub.notifications")


def queue_notification(store: EntityStore, recipient: str, subject: str, body: str,
                       booking_id=None, reply_to=None) -> Notification:
    return store.add(Notification(
        recipient_email=recipient,
        subject=subject,
        body=body,
        booking_id=booking_id,
        reply_to=reply_to,
        status="QUEUED",
    ))


def queue_booking_created(store: EntityStore, booking, hostel, student):
    agent = hostel.agent
    if agent is None:
        return None
    student_name = " ".join(filter(None, [student.first_name, student.last_name]))
    when = booking.preferred_date.isoformat() if booking.preferred_date else "a date to be agreed"
    body = (
        f"Hi {agent.first_name},\n\n"
        f"{student_name} requested an inspection of '{hostel.title}'"
        f" on {when} at {booking.preferred_time or 'any time'}.\n"
    )
    if booking.message:
        body += f"\nMessage: {booking.message}\n"
    body += "\nConfirm or decline it from your dashboard.\n"
    return queue_notification(
        store, agent.email, "New inspection request", body,
        booking_id=booking.id, reply_to=student.email,
    )


def queue_status_changed(store: EntityStore, booking, recipient):
    body = (
        f"Hi {recipient.first_name},\n\n"
        f"The inspection booking for '{booking.hostel.title}' is now {booking.status}.\n"
    )
    return queue_notification(
        store, recipient.email, f"Inspection {booking.status}", body, booking_id=booking.id,
    )


def deliver_pending(store: EntityStore, sender=send_email, limit: int = 50):
    """Send queued rows. Returns (sent, failed) for this run."""
    max_attempts = int(current_app.config.get("NOTIFICATION_MAX_ATTEMPTS", 3))
    sent = failed = 0

    for row in store.queued_notifications(limit):
        ok, error = sender(row.recipient_email, row.subject, row.body, reply_to=row.reply_to)
        row.attempts += 1
        if ok:
            row.status = "SENT"
            row.sent_at = datetime.utcnow()
            row.last_error = None
            sent += 1
            continue

        row.last_error = (error or "unknown error")[:500]
        if row.attempts >= max_attempts:
            row.status = "FAILED"
        failed += 1
        logger.warning("notification %s to %s failed (attempt %s): %s",
                       row.id, row.recipient_email, row.attempts, row.last_error)

    store.commit()
    return sent, failed
