import logging

import click
from flask import Flask, jsonify, g
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes import ALL_BLUEPRINTS
from flask_migrate import Migrate
from security.csrf import csrf_protect
from services.errors import ApiError
from utils.auth_context import load_current_identity


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    _configure_logging(app)

    # Register routes
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_identity():
        load_current_identity()

    @app.before_request
    def _csrf_protect():
        csrf_protect()

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    project_logger = logging.getLogger("hostelhub")
    project_logger.setLevel(level)
    if not project_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s in %(name)s: %(message)s"))
        project_logger.addHandler(handler)


#-------------------------
def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def _api_error(exc):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SchemaValidationError)
    def _schema_error(exc):
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return jsonify(error="Invalid data", details=details), 400

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(error=exc.description), exc.code

    @app.errorhandler(Exception)
    def _unexpected(exc):
        db.session.rollback()
        identity = getattr(g, "identity", None)
        app.logger.exception("Unhandled error (user=%s)", identity.id if identity else None)
        return jsonify(error="Internal server error"), 500


#-------------------------
from models.user import User
from models.school import School
from services.notifications import deliver_pending
from services.store import EntityStore


def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a registered user to admin by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        if user.role != "admin":
            user.role = "admin"
            db.session.commit()

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("create-school")
    @click.argument("name")
    @click.argument("city")
    @click.argument("state")
    def create_school(name, city, state):
        """Add a school that locations and hostels can hang off."""
        school = School(name=name.strip(), city=city.strip(), state=state.strip())
        db.session.add(school)
        db.session.commit()
        click.echo(f"Created school {school.name} ({school.id})")

    @app.cli.command("send-notifications")
    @click.option("--limit", default=50, show_default=True, help="Max queued notifications to send.")
    def send_notifications(limit):
        """Deliver queued booking notifications."""
        sent, failed = deliver_pending(EntityStore(db.session), limit=limit)
        click.echo(f"sent={sent} failed={failed}")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
