"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from otp_auth.api import auth, system
from otp_auth.config import Settings, settings
from otp_auth.database import create_db_and_tables, engine
from otp_auth.errors import AuthError, ChallengeThrottled
from otp_auth.services.auth import AuthService
from otp_auth.services.notifier import SmtpNotifier
from otp_auth.services.otp import OtpEngine
from otp_auth.services.store import SqlCredentialStore
from otp_auth.services.tokens import SessionIssuer
from otp_auth.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_auth_service(config: Settings = settings) -> AuthService:
    """Wire the AuthService with the production collaborators."""
    return AuthService(
        store=SqlCredentialStore(engine),
        notifier=SmtpNotifier(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            from_email=config.mail_from,
            use_tls=config.smtp_use_tls,
        ),
        issuer=SessionIssuer(
            secret=config.secret,
            ttl_seconds=config.token_ttl_seconds,
            algorithm=config.jwt_algorithm,
        ),
        otp=OtpEngine(
            rounds=config.otp_hash_rounds,
            expiry_seconds=config.otp_expiry_seconds,
        ),
        resend_cooldown_seconds=config.otp_resend_cooldown_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    if settings.secret == "change-me-in-production":
        logger.warning("OA_SECRET is not set; session tokens are signed with the default secret")
    # tests install their own service before startup
    if getattr(app.state, "auth_service", None) is None:
        app.state.auth_service = build_auth_service()
    yield


app = FastAPI(
    title="OTP Auth",
    description="Email one-time-code authentication service",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")

    headers = None
    if isinstance(exc, ChallengeThrottled):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.public_message},
        headers=headers,
    )


# Mount routers
app.include_router(auth.router)
app.include_router(system.router)
