from flask import Blueprint, jsonify

from services import schools
from services.store import get_store
from utils.serializers import location_to_dict, school_to_dict

schools_bp = Blueprint("schools", __name__, url_prefix="/api/schools")


@schools_bp.get("")
def list_schools():
    return jsonify([school_to_dict(s) for s in get_store().list_schools()]), 200


@schools_bp.get("/<string:school_id>/locations")
def list_locations(school_id: str):
    store = get_store()
    school = schools.get_school(store, school_id)
    return jsonify([location_to_dict(loc) for loc in store.list_locations(school.id)]), 200
