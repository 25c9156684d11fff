from typing import Annotated, Optional
from pydantic import Field, StringConstraints
from .base import BaseSchema

# 비밀번호는 공백도 그대로 (strip 안 함)
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1)]


class RegisterIn(BaseSchema):
    email: str = Field(..., min_length=1)
    password: Password
    name: str = Field(..., min_length=1)
    recaptcha_token: Optional[str] = None


class RegisterOut(BaseSchema):
    message: str
    requires_verification: bool = True
    requires_approval: bool = True


class LoginIn(BaseSchema):
    email: str = Field(..., min_length=1)
    password: Password


class UserOut(BaseSchema):
    id: str
    email: str
    name: str


class UserEnvelope(BaseSchema):
    user: Optional[UserOut] = None


class LoginOut(BaseSchema):
    user: Optional[UserOut] = None
    mfa_required: bool = False
    mfa_token: Optional[str] = None


class TokenIn(BaseSchema):
    token: str = Field(..., min_length=1)


class EmailIn(BaseSchema):
    email: str = Field(..., min_length=1)


class ResetPasswordIn(BaseSchema):
    token: str = Field(..., min_length=1)
    password: Password


class VerifyEmailOut(BaseSchema):
    message: str
    approved: bool


class ResetPasswordOut(BaseSchema):
    message: str
    email: Optional[str] = None


class MagicLinkLoginOut(BaseSchema):
    message: str
    user: UserOut


# ---------- MFA ----------
class MFASetupOut(BaseSchema):
    secret: str
    otpauth_url: str
    qr_code_data_url: str


class MFAStatusOut(BaseSchema):
    mfa_enabled: bool


class MFAEnableIn(BaseSchema):
    secret: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)


class MFACodeIn(BaseSchema):
    code: str = Field(..., min_length=1)


class MFAVerifyIn(BaseSchema):
    mfa_token: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
