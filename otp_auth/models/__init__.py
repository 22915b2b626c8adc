"""Database models."""

from otp_auth.models.identity import Identity, Role

__all__ = [
    "Identity",
    "Role",
]
