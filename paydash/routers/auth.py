"""Authentication routes and session management."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from paydash import crud
from paydash.auth import User
from paydash.config import SECURE_COOKIES, SESSION_COOKIE_NAME, SESSION_TTL_HOURS
from paydash.database import get_session
from paydash.dependencies import templates
from paydash.schemas import AuthStatus, LoginRequest, LoginResponse, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _session_token(request: Request) -> str | None:
    """Session id from the Authorization header, falling back to the cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def _safe_next(target: str | None) -> str:
    # Prevent open redirects: only allow same-site paths
    if not target or not isinstance(target, str) or "://" in target or not target.startswith("/") or target.startswith("//"):
        return "/dashboard"
    return target


def _start_session(db: Session, user: User) -> str:
    purged = crud.purge_expired_sessions(db)
    if purged:
        logger.info("Purged %d expired sessions", purged)
    record = crud.create_session(db, user, SESSION_TTL_HOURS)
    logger.info("User %s logged in", user.username)
    return record.session_id


@router.get("/login")
def login_page(request: Request):
    """Render login page, optionally preserving a next destination."""
    next_param = request.query_params.get("next")
    return templates.TemplateResponse(request, "auth/login.html", {"next": next_param})


@router.post("/login")
def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    next: str | None = Form(default=None),
    db: Session = Depends(get_session),
):
    """Handle login form submission."""
    user = crud.authenticate_user(db, username.strip(), password)
    if user is None:
        logger.warning("Failed login for %r", username)
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"error": "Invalid credentials. Please try again.", "next": next},
            status_code=401,
        )

    session_id = _start_session(db, user)
    response = RedirectResponse(url=_safe_next(next or request.query_params.get("next")), status_code=303)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        path="/",
        secure=SECURE_COOKIES,
        samesite="lax",
        max_age=SESSION_TTL_HOURS * 3600,
    )
    return response


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_session)):
    """Handle logout: drop the session row and clear the cookie."""
    token = _session_token(request)
    if token:
        crud.delete_session(db, token)
    response = RedirectResponse(url="/login", status_code=303)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return response


def get_current_user(request: Request, db: Session = Depends(get_session)) -> User:
    """Dependency to get current authenticated user."""
    token = _session_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    record = crud.get_active_session(db, token)
    if record is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    return record.user


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    """Dependency to ensure user is admin."""
    if not user.is_admin():
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


# --- JSON API ------------------------------------------------------------


@router.post("/api/login", response_model=LoginResponse)
def api_login(payload: LoginRequest, db: Session = Depends(get_session)) -> LoginResponse:
    user = crud.authenticate_user(db, payload.username, payload.password)
    if user is None:
        logger.warning("Failed API login for %r", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    session_id = _start_session(db, user)
    return LoginResponse(sessionId=session_id, user=UserRead.model_validate(user))


@router.post("/api/logout")
def api_logout(
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    crud.delete_session(db, _session_token(request))
    logger.info("User %s logged out", user.username)
    return {"message": "Logged out successfully"}


@router.get("/api/auth/status", response_model=AuthStatus)
def auth_status(user: User = Depends(get_current_user)) -> AuthStatus:
    return AuthStatus(authenticated=True, user=UserRead.model_validate(user))
