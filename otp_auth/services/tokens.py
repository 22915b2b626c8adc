"""Session tokens: signed, self-contained JWTs carrying an identity id."""

import logging
from datetime import datetime, timedelta, timezone

from jose import jws, jwt
from jose.exceptions import ExpiredSignatureError, JOSEError, JWSError, JWTError

from otp_auth.errors import TokenBadSignature, TokenExpired, TokenMalformed

logger = logging.getLogger(__name__)


class SessionIssuer:
    def __init__(self, secret: str, ttl_seconds: int = 86400, algorithm: str = "HS256"):
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm

    def issue(self, identity_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(identity_id),
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Return the identity id bound into a valid token.

        Raises TokenMalformed, TokenBadSignature or TokenExpired.
        """
        if not token or not isinstance(token, str):
            raise TokenMalformed()

        try:
            header = jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JOSEError as e:
            logger.debug(f"Malformed token: {e}")
            raise TokenMalformed() from e

        if header.get("alg") != self.algorithm:
            raise TokenMalformed()

        # structure and alg are known good here, so any JWSError is a signature mismatch
        try:
            jws.verify(token, self.secret, algorithms=[self.algorithm])
        except JWSError as e:
            raise TokenBadSignature() from e

        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpired() from e
        except JWTError as e:
            logger.debug(f"Invalid token claims: {e}")
            raise TokenMalformed() from e

        subject = claims.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError) as e:
            raise TokenMalformed() from e
