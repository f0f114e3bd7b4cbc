# This project was developed with assistance from AI tools.
"""Authentication and registration schemas."""

from db.enums import UserType
from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    customer_number: str
    email: str
    user_type: UserType = UserType.INDIVIDUAL


class TokenPayload(BaseModel):
    """Decoded bearer token claims."""

    user_id: int
    iat: float
    exp: int | None = None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class VerifyUserRequest(BaseModel):
    customer_number: str = Field(min_length=1)
    email: str = Field(min_length=1)


class VerifyOtpRequest(BaseModel):
    customer_number: str = Field(min_length=1)
    email: str = Field(min_length=1)
    otp: str = Field(min_length=1)


class CompleteRegistrationRequest(VerifyOtpRequest):
    new_password: str = Field(min_length=1)


class RequestOtpRequest(BaseModel):
    email: str = Field(min_length=1)


class VerifyOtpResetRequest(BaseModel):
    email: str = Field(min_length=1)
    otp: str = Field(min_length=1)


class ResetPasswordRequest(VerifyOtpResetRequest):
    new_password: str = Field(min_length=1)


class PushTokenRequest(BaseModel):
    push_token: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    message: str


class LoginUser(BaseModel):
    """User summary returned at login. Keys are camelCase for the mobile client."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    name: str
    customer_number: str = Field(alias="customerNumber")
    user_type: UserType = Field(alias="userType")
    lead_files: list[str] = Field(default_factory=list, alias="leadFiles")


class LoginResponse(BaseModel):
    message: str = "Login successful."
    access_token: str
    token: str
    user: LoginUser
