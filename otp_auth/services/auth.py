"""Email one-time-code authentication: signup/challenge, redemption, lookup."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from otp_auth.errors import AlreadyUsed, ChallengeThrottled, IdentityExists, NotFound, OtpExpired
from otp_auth.models.identity import Identity, Role
from otp_auth.schemas.auth import IdentityRead
from otp_auth.services.notifier import Notifier
from otp_auth.services.otp import OtpEngine
from otp_auth.services.store import CredentialStore
from otp_auth.services.tokens import SessionIssuer

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to our App"
LOGIN_SUBJECT = "Login OTP"


@dataclass
class SignupResult:
    created: bool
    message: str


@dataclass
class LoginResult:
    token: str
    identity: IdentityRead


class AuthService:
    """Drives each identity through Registered -> ChallengeIssued -> Registered.

    Collaborators are injected so the HTTP layer and tests can supply their own.
    """

    def __init__(
        self,
        store: CredentialStore,
        notifier: Notifier,
        issuer: SessionIssuer,
        otp: OtpEngine,
        resend_cooldown_seconds: int = 0,
    ):
        self.store = store
        self.notifier = notifier
        self.issuer = issuer
        self.otp = otp
        self.resend_cooldown_seconds = resend_cooldown_seconds

    def _check_cooldown(self, identity: Identity, now: datetime) -> None:
        if not self.resend_cooldown_seconds or identity.otp_issued_at is None:
            return
        issued_at = identity.otp_issued_at
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        elapsed = (now - issued_at).total_seconds()
        if elapsed < self.resend_cooldown_seconds:
            retry_after = int(self.resend_cooldown_seconds - elapsed) + 1
            logger.info(f"Code resend throttled for identity {identity.id}, retry in {retry_after}s")
            raise ChallengeThrottled(retry_after)

    async def signup_or_challenge(self, email: str) -> SignupResult:
        """Create the identity if unseen, then issue and mail a fresh code."""
        now = datetime.now(timezone.utc)
        identity = await asyncio.to_thread(self.store.find_by_email, email)
        if identity is not None:
            self._check_cooldown(identity, now)

        code, otp_hash = await self.otp.issue()

        created = False
        if identity is None:
            try:
                identity = await asyncio.to_thread(self.store.create, Identity(
                    email=email,
                    username=email,
                    display_name=email.split("@")[0],
                    role=Role.STANDARD,
                    otp_hash=otp_hash,
                    otp_consumed=False,
                    otp_issued_at=now,
                ))
                created = True
            except IdentityExists:
                # lost a concurrent signup race; treat as a returning user
                identity = await asyncio.to_thread(self.store.find_by_email, email)
                if identity is None:
                    raise

        if not created and not await asyncio.to_thread(self.store.record_challenge, identity.id, otp_hash, now):
            raise NotFound()

        if created:
            logger.info(f"Identity {identity.id} created, sending welcome code")
            await self.notifier.send(
                email,
                WELCOME_SUBJECT,
                f"Welcome, {email}! Thank you for signing up. Your OTP is: {code}",
            )
            return SignupResult(created=True, message="User signed up successfully")

        logger.info(f"Login code issued for identity {identity.id}")
        await self.notifier.send(email, LOGIN_SUBJECT, f"Your login OTP is: {code}")
        return SignupResult(created=False, message="Login OTP sent")

    async def redeem_challenge(self, email: str, code: str) -> LoginResult:
        """Exchange a live code for a session token, consuming the code."""
        identity = await asyncio.to_thread(self.store.find_by_email, email)
        if identity is None:
            raise NotFound()

        try:
            await self.otp.verify(code, identity.otp_hash, identity.otp_consumed, identity.otp_issued_at)
        except OtpExpired:
            # an expired challenge is no longer live
            await asyncio.to_thread(self.store.consume_challenge, identity.id, identity.otp_hash)
            logger.info(f"Expired code presented for identity {identity.id}")
            raise

        # the hash guard rejects a code that was re-issued after we read it
        if not await asyncio.to_thread(self.store.consume_challenge, identity.id, identity.otp_hash):
            raise AlreadyUsed()
        identity.otp_consumed = True

        token = self.issuer.issue(identity.id)
        logger.info(f"Identity {identity.id} logged in")
        return LoginResult(token=token, identity=IdentityRead.model_validate(identity))

    def resolve_identity(self, token: str) -> IdentityRead:
        """Return the identity a session token refers to, without its code hash."""
        identity_id = self.issuer.verify(token)
        identity = self.store.find_by_id(identity_id)
        if identity is None:
            raise NotFound()
        return IdentityRead.model_validate(identity)
