from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session, sessionmaker

from verifypro.catalog import DOCUMENT_TYPES
from verifypro.config import settings
from verifypro.database import get_db, get_session_factory
from verifypro.dependencies import get_verifier, require_role, require_session
from verifypro.errors import InvalidStateTransition, NotFound, ValidationError
from verifypro.gate import LoggedIn
from verifypro.models.document import Document
from verifypro.schemas.document import DecisionRequest, DocumentResponse
from verifypro.services import document_service
from verifypro.services.filters import display_confidence
from verifypro.services.verification import Verifier, recommendation_for
from verifypro.services.verification_runner import verification_runner

router = APIRouter(prefix="/documents", tags=["documents"])


def doc_to_response(doc: Document, verification_running: bool | None = None) -> DocumentResponse:
    score = display_confidence(doc)
    if verification_running is None:
        verification_running = verification_runner.is_running(doc.id)
    return DocumentResponse(
        id=doc.id,
        document_id=doc.document_id,
        candidate_id=doc.candidate_id,
        uploaded_by=doc.uploaded_by,
        file_name=doc.file_name,
        doc_type=doc.doc_type,
        doc_type_label=DOCUMENT_TYPES.get(doc.doc_type, doc.doc_type),
        mime_type=doc.mime_type,
        file_size_bytes=doc.file_size_bytes,
        file_hash=doc.file_hash,
        upload_date=doc.upload_date,
        source=doc.source,
        issuer=doc.issuer,
        issue_date=doc.issue_date,
        status=doc.status,
        confidence_score=score,
        recommendation=recommendation_for(score) if doc.decided_by in ("ai", "trusted_source") else None,
        decided_by=doc.decided_by,
        notes=doc.notes,
        reviewer_notes=doc.reviewer_notes,
        verification_details=document_service.load_details(doc),
        request_id=doc.request_id,
        verification_running=verification_running,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


async def _read_limited(file: UploadFile) -> bytes:
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise ValidationError(f"File too large (max {max_bytes} bytes)", field="file", status_code=413)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(None),
    doc_type: str | None = Form(None),
    notes: str | None = Form(None),
    request_id: str | None = Form(None),
    candidate_id: str | None = Form(None),
    session: LoggedIn = Depends(require_session),
    db: Session = Depends(get_db),
    verifier: Verifier = Depends(get_verifier),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    filename = file.filename if file else None
    content_type = file.content_type if file else None
    document_service.check_upload_request(filename, content_type, doc_type)
    content = await _read_limited(file)

    doc = document_service.submit_upload(
        db,
        session,
        filename,
        content_type,
        content,
        doc_type,
        notes=notes,
        request_id=request_id or None,
        candidate_id=candidate_id or None,
    )
    if settings.auto_verify:
        background_tasks.add_task(
            verification_runner.run, doc.id, verifier, session_factory, settings.verification_delay_seconds
        )
    return doc_to_response(doc, verification_running=settings.auto_verify)


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    status: str | None = None,
    session: LoggedIn = Depends(require_session),
    db: Session = Depends(get_db),
):
    return [doc_to_response(d) for d in document_service.list_documents(db, session, status)]


@router.get("/{doc_id}", response_model=DocumentResponse)
async def get_document(doc_id: str, session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    return doc_to_response(document_service.get_document(db, session, doc_id))


@router.get("/{doc_id}/download")
async def download_document(doc_id: str, session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    doc = document_service.get_document(db, session, doc_id)
    if not doc.stored_path:
        raise NotFound("Document has no stored file")

    full_path = document_service.get_document_full_path(doc.stored_path, settings.data_path)
    if not full_path.exists():
        raise NotFound("Document file missing from storage")

    return FileResponse(
        path=str(full_path),
        filename=doc.file_name,
        media_type=doc.mime_type or "application/octet-stream",
    )


@router.post("/{doc_id}/decision", response_model=DocumentResponse)
async def decide_document(
    doc_id: str,
    req: DecisionRequest,
    reviewer: LoggedIn = Depends(require_role("hr")),
    db: Session = Depends(get_db),
):
    """Approve or reject a pending document."""
    doc = document_service.hr_decide(db, reviewer, doc_id, req.decision, req.notes)
    verification_runner.cancel(doc.id)
    return doc_to_response(doc, verification_running=False)


@router.post("/{doc_id}/verification", response_model=DocumentResponse, status_code=202)
async def start_verification(
    doc_id: str,
    background_tasks: BackgroundTasks,
    session: LoggedIn = Depends(require_session),
    db: Session = Depends(get_db),
    verifier: Verifier = Depends(get_verifier),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Re-run verification for a pending document, e.g. after a cancelled run."""
    doc = document_service.get_document(db, session, doc_id)
    if doc.status != "pending":
        raise InvalidStateTransition(f"Document {doc.document_id} is already {doc.status}")
    if verification_runner.is_running(doc.id):
        raise InvalidStateTransition(f"Verification of {doc.document_id} is already running")

    background_tasks.add_task(
        verification_runner.run, doc.id, verifier, session_factory, settings.verification_delay_seconds
    )
    return doc_to_response(doc, verification_running=True)


@router.delete("/{doc_id}/verification")
async def cancel_verification(doc_id: str, session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    doc = document_service.get_document(db, session, doc_id)
    cancelled = verification_runner.cancel(doc.id)
    return {"cancelled": cancelled, "status": doc.status}
