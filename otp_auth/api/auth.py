"""Authentication API: email signup/challenge, code login, current user."""

from fastapi import APIRouter, Depends, Response, status

from otp_auth.api.deps import get_auth_service, get_current_identity
from otp_auth.api.sanitize import SanitizedRoute
from otp_auth.schemas.auth import (
    IdentityRead,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    SignupRequest,
)
from otp_auth.services.auth import AuthService

router = APIRouter(tags=["auth"], route_class=SanitizedRoute)


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": MessageResponse, "description": "Login OTP sent"}},
)
async def signup(
    body: SignupRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    result = await service.signup_or_challenge(body.email)
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return MessageResponse(message=result.message)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.redeem_challenge(body.email, body.otp)
    return LoginResponse(
        message="Login successful",
        token=result.token,
        user=result.identity,
    )


@router.get("/me", response_model=MeResponse)
def me(identity: IdentityRead = Depends(get_current_identity)):
    return MeResponse(user=identity)
