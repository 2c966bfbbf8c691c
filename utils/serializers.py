"""JSON shapes returned by the API (camelCase, never the password hash)."""


def _iso(value):
    return value.isoformat() if value else None


def _num(value):
    return float(value) if value is not None else None


def user_to_dict(u):
    return {
        "id": u.id,
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "profileImageUrl": u.profile_image_url,
        "role": u.role,
        "verifiedStatus": bool(u.verified_status),
        "businessRegNumber": u.business_reg_number,
        "schoolId": u.school_id,
        "createdAt": _iso(u.created_at),
    }


def agent_summary(u):
    if u is None:
        return None
    return {
        "id": u.id,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "verifiedStatus": bool(u.verified_status),
    }


def school_to_dict(s):
    return {
        "id": s.id,
        "name": s.name,
        "city": s.city,
        "state": s.state,
        "createdAt": _iso(s.created_at),
    }


def location_to_dict(loc):
    if loc is None:
        return None
    return {
        "id": loc.id,
        "schoolId": loc.school_id,
        "name": loc.name,
        "latitude": _num(loc.latitude),
        "longitude": _num(loc.longitude),
    }


def hostel_to_dict(h, with_relations=True):
    out = {
        "id": h.id,
        "agentId": h.agent_id,
        "locationId": h.location_id,
        "title": h.title,
        "description": h.description,
        "price": h.price,
        "priceType": h.price_type,
        "roomType": h.room_type,
        "images": list(h.images or []),
        "amenities": list(h.amenities or []),
        "availability": bool(h.availability),
        "createdAt": _iso(h.created_at),
        "updatedAt": _iso(h.updated_at),
    }
    if with_relations:
        out["location"] = location_to_dict(h.location)
        out["agent"] = agent_summary(h.agent)
    return out


def booking_to_dict(b):
    hostel = b.hostel
    student = b.student
    return {
        "id": b.id,
        "studentId": b.student_id,
        "hostelId": b.hostel_id,
        "preferredDate": _iso(b.preferred_date),
        "preferredTime": b.preferred_time,
        "message": b.message,
        "status": b.status,
        "createdAt": _iso(b.created_at),
        "updatedAt": _iso(b.updated_at),
        "hostel": hostel_to_dict(hostel, with_relations=False) if hostel else None,
        "student": {
            "id": student.id,
            "firstName": student.first_name,
            "lastName": student.last_name,
            "email": student.email,
        } if student else None,
    }
