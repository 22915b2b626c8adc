"""Identity model: one record per email-based account."""

from datetime import datetime, timezone
from enum import Enum

from sqlmodel import SQLModel, Field


class Role(str, Enum):
    STANDARD = "standard"
    ADMIN = "admin"


class Identity(SQLModel, table=True):
    __tablename__ = "identity"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    username: str
    display_name: str
    role: Role = Field(default=Role.STANDARD)
    otp_hash: str | None = None  # bcrypt hash of the live code, never the code itself
    otp_consumed: bool = Field(default=True)
    otp_issued_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
