"""Pydantic schemas for the auth API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from otp_auth.models.identity import Role


def _clean_email(value: str) -> str:
    email = value.strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValueError("must be a valid email address")
    return email


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _clean_email(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    otp: str = Field(min_length=1, max_length=16)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _clean_email(value)

    @field_validator("otp", mode="before")
    @classmethod
    def _coerce_otp(cls, value):
        # clients send the code as a number or a string
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class IdentityRead(BaseModel):
    id: int
    email: str
    username: str
    display_name: str
    role: Role
    otp_consumed: bool
    created_at: datetime
    # otp_hash is NEVER exposed

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    token: str
    user: IdentityRead


class MeResponse(BaseModel):
    user: IdentityRead
