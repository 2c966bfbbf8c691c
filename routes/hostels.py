from flask import Blueprint, jsonify, g

from schemas import parse_args, parse_body
from schemas.hostel import HostelCreate, HostelFilters, HostelUpdate
from security.rbac import require_roles
from services import hostels
from services.store import get_store
from utils.serializers import hostel_to_dict

hostels_bp = Blueprint("hostels", __name__, url_prefix="/api")


# ---------- public listings ----------
@hostels_bp.get("/hostels")
def list_hostels():
    filters = parse_args(HostelFilters)
    rows = hostels.search_hostels(get_store(), filters)
    return jsonify([hostel_to_dict(h) for h in rows]), 200


@hostels_bp.get("/hostels/<string:hostel_id>")
def get_hostel(hostel_id: str):
    return jsonify(hostel_to_dict(hostels.get_hostel(get_store(), hostel_id))), 200


# ---------- AGENTS: manage own listings ----------
@hostels_bp.post("/hostels")
@require_roles("agent")
def create_hostel():
    data = parse_body(HostelCreate)
    hostel = hostels.create_hostel(get_store(), g.identity, data)
    return jsonify(hostel_to_dict(hostel)), 201


@hostels_bp.patch("/hostels/<string:hostel_id>")
@require_roles("agent", "admin")
def update_hostel(hostel_id: str):
    data = parse_body(HostelUpdate)
    hostel = hostels.update_hostel(get_store(), g.identity, hostel_id, data)
    return jsonify(hostel_to_dict(hostel)), 200


@hostels_bp.delete("/hostels/<string:hostel_id>")
@require_roles("agent", "admin")
def delete_hostel(hostel_id: str):
    hostels.delete_hostel(get_store(), g.identity, hostel_id)
    return jsonify(message="Hostel deleted"), 200


@hostels_bp.get("/agent/hostels")
@require_roles("agent")
def my_hostels():
    rows = hostels.list_agent_hostels(get_store(), g.identity)
    return jsonify([hostel_to_dict(h) for h in rows]), 200
