import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from verifypro.catalog import DOCUMENT_TYPES, REQUESTABLE_TYPES
from verifypro.config import settings
from verifypro.errors import InvalidStateTransition, NotAuthorized, NotFound, ValidationError
from verifypro.gate import LoggedIn
from verifypro.models.document import Document
from verifypro.models.document_request import DocumentRequest
from verifypro.models.user import User

logger = logging.getLogger(__name__)


def _parse_date(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field=field)


def _resolve_candidate(db: Session, candidate_id: str | None, candidate_email: str | None) -> User:
    if not candidate_id and not candidate_email:
        raise ValidationError("Candidate is required", field="candidate_id")
    query = db.query(User)
    if candidate_id:
        candidate = query.filter(User.id == candidate_id).first()
    else:
        candidate = query.filter(User.email == candidate_email.strip().lower()).first()
    if candidate is None:
        raise NotFound("Candidate not found", field="candidate_id" if candidate_id else "candidate_email")
    if candidate.role != "user":
        raise ValidationError("Documents can only be requested from candidate accounts", field="candidate_id")
    return candidate


def create_request(
    db: Session,
    requester: LoggedIn,
    doc_type: str | None,
    candidate_id: str | None = None,
    candidate_email: str | None = None,
    notes: str | None = None,
    due_date: str | None = None,
    today: date | None = None,
) -> DocumentRequest:
    if not doc_type:
        raise ValidationError("Document type is required", field="doc_type")
    if doc_type not in REQUESTABLE_TYPES:
        raise ValidationError(
            f"Invalid doc_type. Must be one of: {sorted(REQUESTABLE_TYPES)}", field="doc_type"
        )
    candidate = _resolve_candidate(db, candidate_id, candidate_email)

    today = today or datetime.now(timezone.utc).date()
    if due_date:
        due = _parse_date(due_date, "due_date")
        if due < today:
            raise ValidationError("Due date cannot be before the request date", field="due_date")
    else:
        due = today + timedelta(days=settings.default_request_due_days)

    req = DocumentRequest(
        id=str(uuid.uuid4()),
        requester_id=requester.id,
        candidate_id=candidate.id,
        doc_type=doc_type,
        notes=notes,
        request_date=today.isoformat(),
        due_date=due.isoformat(),
        status="open",
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    logger.info("Request %s: %s asked %s for %s", req.id, requester.id, candidate.id, doc_type)
    return req


def list_requests(db: Session, session: LoggedIn, status: str | None = None) -> list[DocumentRequest]:
    query = db.query(DocumentRequest)
    if session.role == "hr":
        query = query.filter(DocumentRequest.requester_id == session.id)
    else:
        query = query.filter(DocumentRequest.candidate_id == session.id)
    if status:
        query = query.filter(DocumentRequest.status == status)
    return query.order_by(DocumentRequest.due_date.asc(), DocumentRequest.request_date.asc()).all()


def get_request(db: Session, session: LoggedIn, request_id: str) -> DocumentRequest:
    req = db.query(DocumentRequest).filter(DocumentRequest.id == request_id).first()
    if not req:
        raise NotFound("Request not found")
    if session.role != "hr" and req.candidate_id != session.id:
        raise NotAuthorized("This request belongs to another candidate")
    return req


def fulfil_matching_request(
    db: Session,
    document: Document,
    request_id: str | None = None,
) -> DocumentRequest | None:
    """Link ``document`` to the request it answers and mark that request fulfilled.

    An explicit ``request_id`` must be open, target the document's candidate and
    ask for the same type. Without one, the oldest open request of the same type
    for that candidate is fulfilled, if any. The caller commits.
    """
    if request_id:
        req = db.query(DocumentRequest).filter(DocumentRequest.id == request_id).first()
        if not req:
            raise NotFound("Request not found", field="request_id")
        if req.candidate_id != document.candidate_id:
            raise ValidationError("Request was issued to a different candidate", field="request_id")
        if req.status != "open":
            raise InvalidStateTransition(f"Request is already {req.status}", field="request_id")
        if req.doc_type != document.doc_type:
            raise ValidationError(
                f"Request asks for {DOCUMENT_TYPES.get(req.doc_type, req.doc_type)}", field="doc_type"
            )
    else:
        req = (
            db.query(DocumentRequest)
            .filter(
                DocumentRequest.candidate_id == document.candidate_id,
                DocumentRequest.doc_type == document.doc_type,
                DocumentRequest.status == "open",
            )
            .order_by(DocumentRequest.request_date.asc())
            .first()
        )
        if req is None:
            return None

    req.status = "fulfilled"
    req.fulfilled_document_id = document.id
    req.fulfilled_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    document.request_id = req.id
    logger.info("Request %s fulfilled by document %s", req.id, document.document_id)
    return req
