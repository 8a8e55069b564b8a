from .crud_citizen import citizen
from .crud_user import user
from .crud_license import license_application, payment, qr_code
from .crud_audit import admin_action
from .crud_auth_session import auth_session
from .crud_permission import user_permission
