import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.orm import Session

from verifypro.catalog import ACCEPTED_UPLOAD_TYPES, DOCUMENT_TYPES
from verifypro.config import settings
from verifypro.errors import (
    DuplicateDocument,
    InvalidStateTransition,
    NotAuthorized,
    NotFound,
    ValidationError,
)
from verifypro.gate import LoggedIn
from verifypro.models.document import Document
from verifypro.models.user import User
from verifypro.services.filters import DOCUMENT_STATUSES
from verifypro.services.request_service import fulfil_matching_request
from verifypro.services.trusted_source import DocumentSource
from verifypro.services.verification import Verifier
from verifypro.utils.filesystem import ensure_candidate_dir, sanitize_filename
from verifypro.utils.hashing import sha256_bytes
from verifypro.utils.security import generate_document_ref

logger = logging.getLogger(__name__)

DECISIONS = ("verified", "rejected")

_DEFAULT_REVIEWER_NOTES = {
    "verified": "Document verified successfully through AI analysis.",
    "rejected": "Document rejected due to verification concerns.",
}


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def dump_details(details: dict | None) -> str | None:
    return json.dumps(details) if details else None


def load_details(doc: Document) -> dict | None:
    if not doc.verification_details:
        return None
    return json.loads(doc.verification_details)


def store_document(candidate_id: str, filename: str, content: bytes) -> tuple[str, str, int]:
    """Store an upload immutably. Returns (relative_path, file_hash, file_size)."""
    file_hash = sha256_bytes(content)
    safe_name = sanitize_filename(filename)
    stored_name = f"{file_hash[:8]}_{safe_name}"

    candidate_dir = ensure_candidate_dir(candidate_id)
    doc_path = candidate_dir / stored_name
    if not doc_path.exists():
        doc_path.write_bytes(content)
        os.chmod(doc_path, 0o444)

    relative_path = f"uploads/{candidate_id}/{stored_name}"
    return relative_path, file_hash, len(content)


def get_document_full_path(stored_path: str, data_path: Path) -> Path:
    return data_path / stored_path


def check_upload_request(filename: str | None, content_type: str | None, doc_type: str | None):
    """Validate everything about an upload that does not need the file body."""
    if not filename:
        raise ValidationError("Please upload at least one document", field="file")
    if not doc_type:
        raise ValidationError("Please select the type of document you are uploading", field="doc_type")
    if doc_type not in DOCUMENT_TYPES:
        raise ValidationError(f"Invalid doc_type. Must be one of: {sorted(DOCUMENT_TYPES)}", field="doc_type")

    extension = Path(filename).suffix.lower()
    allowed = ACCEPTED_UPLOAD_TYPES.get(content_type or "")
    if allowed is None or extension not in allowed:
        raise ValidationError(
            "Unsupported file type. Upload a PDF, image (PNG, JPG, GIF) or Word document",
            field="file",
        )


def _resolve_candidate_id(db: Session, uploader: LoggedIn, candidate_id: str | None) -> str:
    if uploader.role == "user":
        if candidate_id and candidate_id != uploader.id:
            raise NotAuthorized("Candidates can only upload their own documents")
        return uploader.id

    if not candidate_id:
        raise ValidationError("Select the candidate this document belongs to", field="candidate_id")
    candidate = db.query(User).filter(User.id == candidate_id).first()
    if candidate is None or candidate.role != "user":
        raise NotFound("Candidate not found", field="candidate_id")
    return candidate.id


def submit_upload(
    db: Session,
    uploader: LoggedIn,
    filename: str | None,
    content_type: str | None,
    content: bytes,
    doc_type: str | None,
    notes: str | None = None,
    request_id: str | None = None,
    candidate_id: str | None = None,
) -> Document:
    """Create a pending document for an upload. Verification is scheduled by the caller."""
    check_upload_request(filename, content_type, doc_type)
    if len(content) > settings.max_upload_bytes:
        raise ValidationError(
            f"File too large (max {settings.max_upload_bytes} bytes)", field="file", status_code=413
        )
    if not content:
        raise ValidationError("Empty file", field="file")

    owner_id = _resolve_candidate_id(db, uploader, candidate_id)
    file_hash = sha256_bytes(content)
    existing = db.query(Document).filter(
        Document.candidate_id == owner_id,
        Document.file_hash == file_hash,
    ).first()
    if existing:
        raise DuplicateDocument(f"This file was already uploaded as {existing.document_id}", field="file")

    now = _now()
    doc = Document(
        id=str(uuid.uuid4()),
        document_id=generate_document_ref(),
        candidate_id=owner_id,
        uploaded_by=uploader.id,
        file_name=filename,
        doc_type=doc_type,
        mime_type=content_type,
        upload_date=now[:10],
        source="manual",
        status="pending",
        confidence_score=0,
        notes=notes,
        created_at=now,
        updated_at=now,
    )
    fulfil_matching_request(db, doc, request_id)

    stored_path, file_hash, file_size = store_document(owner_id, filename, content)
    doc.stored_path = stored_path
    doc.file_hash = file_hash
    doc.file_size_bytes = file_size

    db.add(doc)
    db.commit()
    db.refresh(doc)
    logger.info("Document %s uploaded for %s (pending)", doc.document_id, owner_id)
    return doc


async def run_verification(db: Session, document_id: str, verifier: Verifier) -> Document:
    """Apply the verifier's result to a pending document.

    A document that left ``pending`` before or while the verifier ran is
    returned unchanged.
    """
    doc = db.query(Document).filter(Document.id == document_id).first()
    if not doc:
        raise NotFound("Document not found")
    if doc.status != "pending":
        logger.info("Skipping verification of %s: already %s", doc.document_id, doc.status)
        return doc

    result = await verifier.verify(doc)
    db.refresh(doc)
    if doc.status != "pending":
        logger.info("Discarding verification of %s: decided as %s meanwhile", doc.document_id, doc.status)
        return doc
    if result.status not in DECISIONS:
        raise ValueError(f"Verifier returned unsupported status {result.status!r}")

    doc.status = result.status
    doc.confidence_score = max(0, min(100, int(result.confidence_score)))
    doc.decided_by = "ai"
    doc.verification_details = dump_details(result.details)
    doc.updated_at = _now()
    db.commit()
    db.refresh(doc)
    logger.info("Document %s %s by AI with %d%% confidence", doc.document_id, doc.status, doc.confidence_score)
    return doc


def hr_decide(db: Session, reviewer: LoggedIn, document_id: str, decision: str, notes: str | None = None) -> Document:
    if decision not in DECISIONS:
        raise ValidationError(f"Decision must be one of: {', '.join(DECISIONS)}", field="decision")
    doc = db.query(Document).filter(Document.id == document_id).first()
    if not doc:
        raise NotFound("Document not found")
    if doc.status != "pending":
        raise InvalidStateTransition(f"Document {doc.document_id} is already {doc.status}")

    doc.status = decision
    doc.reviewer_notes = notes or _DEFAULT_REVIEWER_NOTES[decision]
    doc.decided_by = "reviewer"
    doc.updated_at = _now()
    db.commit()
    db.refresh(doc)
    logger.info("Document %s %s by reviewer %s", doc.document_id, decision, reviewer.id)
    return doc


async def import_from_trusted_source(
    db: Session,
    candidate: LoggedIn,
    source: DocumentSource,
    abc_id: str,
    source_ids: list[str],
) -> list[Document]:
    """Create pre-verified documents for the selected source documents.

    Documents already imported for this candidate are skipped.
    """
    if not source_ids:
        raise ValidationError("Select at least one document to import", field="document_ids")
    available = {d.id: d for d in await source.list_documents(abc_id)}
    unknown = [sid for sid in source_ids if sid not in available]
    if unknown:
        raise NotFound(f"Unknown {source.name} documents: {', '.join(unknown)}", field="document_ids")

    created = []
    for sid in dict.fromkeys(source_ids):
        item = available[sid]
        already = db.query(Document).filter(
            Document.candidate_id == candidate.id,
            Document.source == "digilocker",
            Document.file_name == item.name,
            Document.issuer == item.issuer,
        ).first()
        if already:
            logger.info("Skipping %s: already imported as %s", item.name, already.document_id)
            continue

        now = _now()
        doc = Document(
            id=str(uuid.uuid4()),
            document_id=generate_document_ref(),
            candidate_id=candidate.id,
            uploaded_by=candidate.id,
            file_name=item.name,
            doc_type=item.doc_type,
            upload_date=now[:10],
            source="digilocker",
            issuer=item.issuer,
            issue_date=item.issue_date,
            status="verified",
            confidence_score=settings.trusted_import_score,
            decided_by="trusted_source",
            notes=f"Imported from {source.name}; issued by {item.issuer}",
            verification_details=dump_details({
                "engine": source.name,
                "extracted_info": {"name": candidate.name, "issuer": item.issuer, "issue_date": item.issue_date},
            }),
            created_at=now,
            updated_at=now,
        )
        fulfil_matching_request(db, doc)
        db.add(doc)
        db.flush()  # later lookups must see this request as fulfilled
        created.append(doc)

    db.commit()
    for doc in created:
        db.refresh(doc)
    logger.info("Imported %d documents from %s for %s", len(created), source.name, candidate.id)
    return created


def list_documents(db: Session, session: LoggedIn, status: str | None = None) -> list[Document]:
    if status and status not in DOCUMENT_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(DOCUMENT_STATUSES)}", field="status")
    query = db.query(Document)
    if session.role != "hr":
        query = query.filter(Document.candidate_id == session.id)
    if status:
        query = query.filter(Document.status == status)
    return query.order_by(Document.created_at.desc()).all()


def get_document(db: Session, session: LoggedIn, document_id: str) -> Document:
    doc = db.query(Document).filter(Document.id == document_id).first()
    if not doc:
        raise NotFound("Document not found")
    if session.role != "hr" and doc.candidate_id != session.id:
        raise NotAuthorized("This document belongs to another candidate")
    return doc
