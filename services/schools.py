from models.location import Location
from models.school import School
from security.rbac import authorize
from services.errors import NotFoundError
from services.store import EntityStore
from utils.audit import log_event


def get_school(store: EntityStore, school_id: str) -> School:
    school = store.get_school(school_id)
    if school is None:
        raise NotFoundError("School not found")
    return school


def create_school(store: EntityStore, identity, name: str, city: str, state: str) -> School:
    authorize(identity, {"admin"}).raise_for_denial()
    school = store.add(School(name=name, city=city, state=state))
    store.commit()
    log_event("SCHOOL_CREATE", user_id=identity.id, entity="school", entity_id=school.id)
    return school


def create_location(store: EntityStore, identity, school_id: str, data) -> Location:
    authorize(identity, {"admin"}).raise_for_denial()
    school = get_school(store, school_id)
    location = store.add(Location(school_id=school.id, **data.model_dump()))
    store.commit()
    log_event("LOCATION_CREATE", user_id=identity.id, entity="location", entity_id=location.id)
    return location
