from license_portal.db.session import get_db

__all__ = ["get_db"]
