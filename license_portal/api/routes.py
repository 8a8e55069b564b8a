from fastapi import APIRouter

from license_portal.api.v1.endpoints import (
    admin,
    applications,
    apply,
    auth,
    license_applications,
    payments,
    permissions,
    qr_codes,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(apply.router, prefix="/apply", tags=["apply"])
api_router.include_router(license_applications.router, prefix="/license-applications", tags=["license-applications"])
api_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_router.include_router(payments.router, prefix="/applications", tags=["payments"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(qr_codes.router, prefix="/qr-codes", tags=["qr-codes"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
