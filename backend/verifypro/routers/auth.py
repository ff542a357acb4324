from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from verifypro.config import settings
from verifypro.database import get_db
from verifypro.dependencies import SESSION_COOKIE, get_session, get_token, require_session
from verifypro.gate import LOGIN_ROUTE, LoggedIn, LoggedOut, home_for
from verifypro.schemas.auth import LoginRequest, LoginResponse, SessionStatusResponse, SessionUser
from verifypro.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_user(session: LoggedIn) -> SessionUser:
    return SessionUser(id=session.id, email=session.email, name=session.name, role=session.role)


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest, response: Response, db: Session = Depends(get_db)):
    token, session = auth_service.login(db, req.email, req.password, req.role)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(
        token=token,
        expires_in_seconds=settings.session_ttl_seconds,
        user=_session_user(session),
        home=home_for(session.role),
    )


@router.post("/logout")
async def logout(
    response: Response,
    _session: LoggedIn = Depends(require_session),
    token: str | None = Depends(get_token),
):
    auth_service.logout(token)
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "You have been successfully logged out.", "home": LOGIN_ROUTE}


@router.get("/session", response_model=SessionStatusResponse)
async def session_status(session: LoggedIn | LoggedOut = Depends(get_session)):
    if isinstance(session, LoggedIn):
        return SessionStatusResponse(logged_in=True, user=_session_user(session), home=home_for(session.role))
    return SessionStatusResponse(logged_in=False, home=LOGIN_ROUTE)
