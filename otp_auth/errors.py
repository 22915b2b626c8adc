"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to and a stable machine-readable
code. Errors with a 5xx status expose only an opaque public message; the
original detail stays in the exception for logging.
"""

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "AUTH_ERROR"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        if self.status_code >= 500:
            return self.default_message
        return self.message


class NotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "User not found"


class AlreadyUsed(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "ALREADY_USED"
    default_message = "OTP has already been used"


class InvalidCode(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CODE"
    default_message = "Invalid OTP"


class OtpExpired(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "OTP_EXPIRED"
    default_message = "OTP has expired, request a new one"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    default_message = "Invalid or expired token"


class TokenExpired(Unauthenticated):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class TokenMalformed(Unauthenticated):
    code = "TOKEN_MALFORMED"
    default_message = "Token is malformed"


class TokenBadSignature(Unauthenticated):
    code = "TOKEN_BAD_SIGNATURE"
    default_message = "Token signature is invalid"


class ChallengeThrottled(AuthError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "THROTTLED"
    default_message = "A code was sent recently, try again later"

    def __init__(self, retry_after: int, message: str | None = None):
        self.retry_after = retry_after
        super().__init__(message)


class PayloadTooDeep(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "PAYLOAD_TOO_DEEP"
    default_message = "Request payload is nested too deeply"


class DeliveryFailed(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "DELIVERY_FAILED"
    default_message = "An error occurred while sending the code"


class StoreUnavailable(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORE_UNAVAILABLE"
    default_message = "An internal error occurred"


class IdentityExists(AuthError):
    """Raised by the store when a create loses the unique-email race."""

    status_code = status.HTTP_409_CONFLICT
    code = "IDENTITY_EXISTS"
    default_message = "User already exists"
