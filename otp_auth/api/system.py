"""System API: health check."""

from fastapi import APIRouter

from otp_auth.api.sanitize import SanitizedRoute

router = APIRouter(tags=["system"], route_class=SanitizedRoute)


@router.get("/health")
def health_check():
    return {"status": "ok"}
