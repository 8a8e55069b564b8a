from .token import TokenPayload
from .user import User, UserCreate, UserUpdate
from .citizen import Citizen, CitizenCreate, CitizenUpdate
from .application import (
    PersonalInfoRequest,
    LicenseApplicationRequest,
    ApplicationListRequest,
    ApplicationDetailsRequest,
    ReviewRequest,
    BatchReviewRequest,
    AdminApplicationRequest,
    PickupRequest,
)
from .payment import PaymentRequest
from .qr_code import QRGenerateRequest, QRVerifyRequest
from .auth import (
    OTPInitiateRequest,
    OTPVerifyRequest,
    SignupRequest,
    LoginRequest,
    UpdateProfileRequest,
    ResetPasswordRequest,
)
from .permission import PermissionsRequest
