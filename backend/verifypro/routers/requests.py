from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from verifypro.catalog import DOCUMENT_TYPES
from verifypro.config import settings
from verifypro.database import get_db
from verifypro.dependencies import require_role, require_session
from verifypro.errors import ValidationError
from verifypro.gate import LoggedIn
from verifypro.models.document_request import DocumentRequest
from verifypro.schemas.request import DocumentRequestCreate, DocumentRequestResponse
from verifypro.services import request_service
from verifypro.services.filters import REQUEST_STATUSES, is_urgent

router = APIRouter(prefix="/requests", tags=["requests"])


def request_to_response(req: DocumentRequest, now: datetime | None = None) -> DocumentRequestResponse:
    now = now or datetime.now(timezone.utc)
    return DocumentRequestResponse(
        id=req.id,
        requester_id=req.requester_id,
        candidate_id=req.candidate_id,
        doc_type=req.doc_type,
        doc_type_label=DOCUMENT_TYPES.get(req.doc_type, req.doc_type),
        notes=req.notes,
        request_date=req.request_date,
        due_date=req.due_date,
        status=req.status,
        urgent=req.status == "open" and is_urgent(req, now, settings.urgency_threshold_days),
        fulfilled_document_id=req.fulfilled_document_id,
        fulfilled_at=req.fulfilled_at,
    )


@router.post("", response_model=DocumentRequestResponse, status_code=201)
async def create_request(
    req: DocumentRequestCreate,
    requester: LoggedIn = Depends(require_role("hr")),
    db: Session = Depends(get_db),
):
    created = request_service.create_request(
        db,
        requester,
        req.doc_type,
        candidate_id=req.candidate_id,
        candidate_email=req.candidate_email,
        notes=req.notes,
        due_date=req.due_date,
    )
    return request_to_response(created)


@router.get("", response_model=list[DocumentRequestResponse])
async def list_requests(
    status: str | None = None,
    session: LoggedIn = Depends(require_session),
    db: Session = Depends(get_db),
):
    if status and status not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(REQUEST_STATUSES)}", field="status")
    now = datetime.now(timezone.utc)
    return [request_to_response(r, now) for r in request_service.list_requests(db, session, status)]


@router.get("/{request_id}", response_model=DocumentRequestResponse)
async def get_request(request_id: str, session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    return request_to_response(request_service.get_request(db, session, request_id))
