"""Screen-level view models, each behind the role gate.

A gated view that the session may not see answers 303 to the login route or
to the role's home view, with no view content.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from verifypro.catalog import ACCEPTED_UPLOAD_TYPES, DOCUMENT_TYPES
from verifypro.config import settings
from verifypro.database import get_db
from verifypro.dependencies import get_session
from verifypro.gate import LOGIN_ROUTE, LoggedIn, LoggedOut, check_view_access, home_for
from verifypro.routers.documents import doc_to_response
from verifypro.routers.requests import request_to_response
from verifypro.services import digilocker_service, document_service, request_service
from verifypro.services.filters import filter_by_status, summarize

router = APIRouter(tags=["views"])


def _redirect(target: str) -> RedirectResponse:
    return RedirectResponse(url=target, status_code=303)


def _user_payload(session: LoggedIn) -> dict:
    return {"id": session.id, "name": session.name, "email": session.email, "role": session.role}


def _dashboard(db: Session, session: LoggedIn, view: str) -> dict:
    now = datetime.now(timezone.utc)
    docs = document_service.list_documents(db, session)
    requests = request_service.list_requests(db, session)
    return {
        "view": view,
        "user": _user_payload(session),
        "summary": summarize(docs, requests, now, settings.urgency_threshold_days),
        "tabs": {
            "all": [doc_to_response(d) for d in docs],
            "verified": [doc_to_response(d) for d in filter_by_status(docs, "verified")],
            "pending": [doc_to_response(d) for d in filter_by_status(docs, "pending")],
        },
        "requests": [request_to_response(r, now) for r in requests],
    }


@router.get("/landing")
async def landing_view(session: LoggedIn | LoggedOut = Depends(get_session)):
    logged_in = isinstance(session, LoggedIn)
    return {
        "view": "landing",
        "logged_in": logged_in,
        "home": home_for(session.role) if logged_in else LOGIN_ROUTE,
    }


@router.get("/")
@router.get("/login")
async def login_view():
    return {"view": "login", "roles": ["hr", "user"], "min_password_length": settings.min_password_length}


@router.get("/hr-dashboard")
async def hr_dashboard_view(session: LoggedIn | LoggedOut = Depends(get_session), db: Session = Depends(get_db)):
    target = check_view_access(session, "hr")
    if target:
        return _redirect(target)
    return _dashboard(db, session, "hr-dashboard")


@router.get("/user-dashboard")
async def user_dashboard_view(session: LoggedIn | LoggedOut = Depends(get_session), db: Session = Depends(get_db)):
    target = check_view_access(session, "user")
    if target:
        return _redirect(target)
    payload = _dashboard(db, session, "user-dashboard")
    payload["digilocker_connected"] = digilocker_service.get_link(db, session) is not None
    return payload


@router.get("/upload")
async def upload_view(session: LoggedIn | LoggedOut = Depends(get_session), db: Session = Depends(get_db)):
    target = check_view_access(session)
    if target:
        return _redirect(target)
    open_requests = []
    if session.role == "user":
        open_requests = [request_to_response(r) for r in request_service.list_requests(db, session, "open")]
    return {
        "view": "upload",
        "user": _user_payload(session),
        "document_types": DOCUMENT_TYPES,
        "accepted_types": {mime: sorted(exts) for mime, exts in ACCEPTED_UPLOAD_TYPES.items()},
        "max_upload_bytes": settings.max_upload_bytes,
        "open_requests": open_requests,
        "back": home_for(session.role),
    }


@router.get("/digilocker")
async def digilocker_view(session: LoggedIn | LoggedOut = Depends(get_session), db: Session = Depends(get_db)):
    target = check_view_access(session)
    if target:
        return _redirect(target)
    link = digilocker_service.get_link(db, session) if session.role == "user" else None
    return {
        "view": "digilocker",
        "user": _user_payload(session),
        "connected": link is not None,
        "abc_id": link.abc_id if link else None,
        "back": home_for(session.role),
    }
