"""Admin login and dashboard endpoints."""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from buildathon.config import ADMIN_COOKIE_NAME, get_settings
from buildathon.core.logging import get_logger
from buildathon.db import get_db
from buildathon.schemas.admin import AdminLogin, DashboardRead
from buildathon.security import create_session_value, require_admin, verify_admin_credentials
from buildathon.services.dashboard import build_dashboard
from buildathon.utils.errors import error_response

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = get_logger(__name__)


def _secure_cookies() -> bool:
    return get_settings().app_env.lower() not in {"dev", "local", "test"}


@router.post("/login")
def login(payload: AdminLogin) -> JSONResponse:
    if not verify_admin_credentials(payload.username, payload.password):
        logger.info("Admin login rejected")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_response("INVALID_CREDENTIALS", "Invalid credentials."),
        )

    cookie_value = create_session_value()
    if not cookie_value:
        logger.error("Admin login attempted without ADMIN_SESSION_SECRET configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(
                "ADMIN_AUTH_NOT_CONFIGURED",
                "Admin auth not configured (missing ADMIN_SESSION_SECRET).",
            ),
        )

    response = JSONResponse(content={"ok": True})
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        cookie_value,
        max_age=get_settings().ADMIN_SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=_secure_cookies(),
    )
    logger.info("Admin logged in")
    return response


@router.post("/logout")
def logout() -> JSONResponse:
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(
        ADMIN_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=_secure_cookies(),
    )
    return response


@router.get("/dashboard", response_model=DashboardRead)
def dashboard(
    db: Session = Depends(get_db),
    _actor: str = Depends(require_admin),
) -> DashboardRead:
    """Teams with members, projects and milestones, plus country shares."""

    return build_dashboard(db)
