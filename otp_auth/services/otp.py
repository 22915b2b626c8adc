"""One-time code generation, hashing and verification."""

import asyncio
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt

from otp_auth.errors import AlreadyUsed, InvalidCode, OtpExpired

OTP_MIN = 100000
OTP_MAX = 999999


def generate_code() -> str:
    """Uniformly random 6-digit code in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpEngine:
    """Issues bcrypt-hashed one-time codes and checks them exactly once.

    The engine holds no state: the caller persists the hash and the consumed
    flag, and marks the record consumed after a successful verify().
    """

    def __init__(self, rounds: int = 10, expiry_seconds: int = 600):
        self.rounds = rounds
        self.expiry_seconds = expiry_seconds

    def _hash(self, code: str) -> str:
        return bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    @staticmethod
    def _check(code: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(code.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False

    async def issue(self) -> tuple[str, str]:
        """Return (plaintext_code, hash). Hashing runs off the event loop."""
        code = generate_code()
        hashed = await asyncio.to_thread(self._hash, code)
        return code, hashed

    def is_expired(self, issued_at: datetime | None, now: datetime | None = None) -> bool:
        if not self.expiry_seconds or issued_at is None:
            return False
        if issued_at.tzinfo is None:
            # SQLite hands datetimes back naive; they are stored as UTC
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return now - issued_at > timedelta(seconds=self.expiry_seconds)

    async def verify(
        self,
        code: str,
        stored_hash: str | None,
        consumed: bool,
        issued_at: datetime | None = None,
    ) -> bool:
        """Check a submitted code against the live challenge.

        Raises AlreadyUsed when the challenge was consumed, OtpExpired when it
        outlived expiry_seconds and InvalidCode when the hash does not match.
        Returns True on success; the caller must then mark it consumed.
        """
        if consumed:
            raise AlreadyUsed()
        if self.is_expired(issued_at):
            raise OtpExpired()
        if not stored_hash:
            raise InvalidCode()
        matched = await asyncio.to_thread(self._check, str(code), stored_hash)
        if not matched:
            raise InvalidCode()
        return True
