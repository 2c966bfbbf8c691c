from flask import Blueprint, jsonify, g, request

from models.audit_log import AuditLog
from schemas import parse_body
from schemas.school import LocationCreate, SchoolCreate
from security.rbac import require_roles
from services import agents, schools
from services.store import get_store
from utils.serializers import location_to_dict, school_to_dict, user_to_dict

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/pending-agents")
@require_roles("admin")
def pending_agents():
    rows = agents.list_pending_agents(get_store(), g.identity)
    return jsonify([user_to_dict(u) for u in rows]), 200


@admin_bp.post("/verify-agent/<string:agent_id>")
@require_roles("admin")
def verify_agent(agent_id: str):
    agent = agents.verify_agent(get_store(), g.identity, agent_id)
    return jsonify(user_to_dict(agent)), 200


@admin_bp.post("/schools")
@require_roles("admin")
def create_school():
    data = parse_body(SchoolCreate)
    school = schools.create_school(get_store(), g.identity, data.name, data.city, data.state)
    return jsonify(school_to_dict(school)), 201


@admin_bp.post("/schools/<string:school_id>/locations")
@require_roles("admin")
def create_location(school_id: str):
    data = parse_body(LocationCreate)
    location = schools.create_location(get_store(), g.identity, school_id, data)
    return jsonify(location_to_dict(location)), 201


@admin_bp.get("/audit-logs")
@require_roles("admin")
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    q = AuditLog.query
    action = request.args.get("action")
    if action:
        q = q.filter(AuditLog.action == action)
    user_id = request.args.get("userId")
    if user_id:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([r.to_dict() for r in rows]), 200
