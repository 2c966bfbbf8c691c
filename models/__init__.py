from .db import db
from .user import User, ROLES
from .school import School
from .location import Location
from .hostel import Hostel, PRICE_TYPES, ROOM_TYPES
from .booking import Booking, BOOKING_STATUSES
from .notification import Notification
from .session import AuthSession
from .audit_log import AuditLog
