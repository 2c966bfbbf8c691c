from flask import Blueprint, jsonify, g

from services.dashboard import dashboard_for
from services.store import get_store
from utils.auth_context import login_required

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard")
@login_required
def dashboard():
    return jsonify(dashboard_for(get_store(), g.identity)), 200
