import smtplib
from email.message import EmailMessage

from flask import current_app


def _smtp_settings() -> dict:
    cfg = current_app.config
    return {
        "host": cfg.get("SMTP_HOST"),
        "port": cfg.get("SMTP_PORT", 587),
        "username": cfg.get("SMTP_USERNAME"),
        "password": cfg.get("SMTP_PASSWORD"),
        "sender": cfg.get("SMTP_FROM_EMAIL") or cfg.get("SMTP_USERNAME"),
        "tls": cfg.get("SMTP_USE_TLS", True),
    }


def build_message(sender: str, to_email: str, subject: str, body: str, reply_to=None) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to_email
    msg["Subject"] = subject
    if reply_to:
        # agents answer booking mail straight to the student
        msg["Reply-To"] = reply_to
    msg.set_content(body)
    return msg


def send_email(to_email: str, subject: str, body: str, reply_to=None):
    """Returns (ok, error). Never raises; the outbox decides what a failure means."""
    smtp = _smtp_settings()
    if not smtp["host"] or not smtp["sender"]:
        return False, "Email not configured"

    msg = build_message(smtp["sender"], to_email, subject, body, reply_to=reply_to)
    try:
        with smtplib.SMTP(smtp["host"], smtp["port"], timeout=10) as server:
            if smtp["tls"]:
                server.starttls()
            if smtp["username"] and smtp["password"]:
                server.login(smtp["username"], smtp["password"])
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)
    return True, None
