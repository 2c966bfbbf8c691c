from .health import health_bp
from .auth import auth_bp
from .schools import schools_bp
from .hostels import hostels_bp
from .bookings import bookings_bp
from .admin import admin_bp
from .dashboard import dashboard_bp

ALL_BLUEPRINTS = (
    health_bp,
    auth_bp,
    schools_bp,
    hostels_bp,
    bookings_bp,
    admin_bp,
    dashboard_bp,
)
