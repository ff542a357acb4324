from fastapi import Depends, Header, Request

from verifypro.config import settings
from verifypro.errors import NotAuthenticated, NotAuthorized
from verifypro.gate import LoggedIn, LoggedOut
from verifypro.services.auth_service import auth_service
from verifypro.services.trusted_source import DocumentSource, MockDigiLockerSource
from verifypro.services.verification import MockVerifier, Verifier

SESSION_COOKIE = "verifypro_session"


def _extract_token(request: Request, authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    return request.cookies.get(SESSION_COOKIE)


async def get_token(request: Request, authorization: str | None = Header(None)) -> str | None:
    return _extract_token(request, authorization)


async def get_session(token: str | None = Depends(get_token)) -> LoggedIn | LoggedOut:
    return auth_service.resolve(token)


async def require_session(session: LoggedIn | LoggedOut = Depends(get_session)) -> LoggedIn:
    if not isinstance(session, LoggedIn):
        raise NotAuthenticated("Sign in to continue")
    return session


def require_role(role: str):
    async def _require_role(session: LoggedIn = Depends(require_session)) -> LoggedIn:
        if session.role != role:
            raise NotAuthorized(f"Only {role} accounts may do this")
        return session

    return _require_role


def get_verifier() -> Verifier:
    return MockVerifier(
        min_score=settings.confidence_min,
        max_score=settings.confidence_max,
    )


def get_document_source() -> DocumentSource:
    return MockDigiLockerSource(connect_delay=settings.digilocker_connect_delay_seconds)
