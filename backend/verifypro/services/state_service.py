"""Versioned snapshot of one user's local state.

Version 0 is the unversioned key/value layout kept by the browser demo
(``user``, ``digilocker_connected``, ``digilocker_abc_id``, ``user_uploads`` /
``user_documents`` with camelCase records). Version 1 adds ``schema_version``
and snake_case document records.
"""

import logging
import uuid
from datetime import datetime, timezone

import pydantic
from sqlalchemy.orm import Session

from verifypro.catalog import DOCUMENT_TYPES
from verifypro.database import SCHEMA_VERSION
from verifypro.errors import NotAuthorized, ValidationError
from verifypro.gate import LoggedIn
from verifypro.models.document import Document
from verifypro.models.trusted_source import TrustedSourceLink
from verifypro.schemas.state import StateDocument, StateSnapshot, StateUser
from verifypro.services.document_service import dump_details, load_details
from verifypro.services.filters import DOCUMENT_STATUSES, display_confidence
from verifypro.utils.security import generate_document_ref

logger = logging.getLogger(__name__)

# Categories used by the demo's DigiLocker screen and mock data
_LEGACY_DOC_TYPES = {
    "identity": "identity-proof",
    "license": "identity-proof",
    "education": "degree-certificate",
    "certificate": "degree-certificate",
}

_LEGACY_FIELDS = {
    "id": "document_id",
    "fileName": "file_name",
    "documentType": "doc_type",
    "fileType": "doc_type",
    "uploadDate": "upload_date",
    "confidenceScore": "confidence_score",
    "hrNotes": "reviewer_notes",
}


def _normalize_doc_type(value: str | None) -> str:
    if not isinstance(value, str) or not value:
        return "other"
    value = value.strip().lower()
    if value in DOCUMENT_TYPES:
        return value
    return _LEGACY_DOC_TYPES.get(value, "other")


def _migrate_legacy_record(record: dict) -> dict:
    if not isinstance(record, dict):
        raise ValidationError("Each legacy document must be an object", field="user_documents")
    migrated = {}
    for key, value in record.items():
        migrated[_LEGACY_FIELDS.get(key, key)] = value
    extracted = migrated.pop("extractedInfo", None) or {}
    if not isinstance(extracted, dict):
        raise ValidationError("extractedInfo must be an object", field="user_documents")
    migrated.setdefault("issuer", extracted.get("issuer"))
    migrated.setdefault("issue_date", extracted.get("issueDate"))
    if extracted:
        migrated.setdefault("verification_details", {"extracted_info": extracted})
    migrated["doc_type"] = _normalize_doc_type(migrated.get("doc_type"))
    if migrated.get("document_id") is not None:
        migrated["document_id"] = str(migrated["document_id"])
    return migrated


def _legacy_records(payload: dict, key: str) -> list:
    records = payload.get(key) or []
    if not isinstance(records, list):
        raise ValidationError(f"{key} must be a list", field=key)
    return records


def migrate_state(payload: dict) -> tuple[dict, int]:
    """Bring a snapshot up to the current schema. Returns (snapshot, original_version)."""
    version = payload.get("schema_version", 0)
    if not isinstance(version, int) or version < 0:
        raise ValidationError("schema_version must be a non-negative integer", field="schema_version")
    if version > SCHEMA_VERSION:
        raise ValidationError(f"Unsupported schema_version {version}", field="schema_version")
    if version == SCHEMA_VERSION:
        return payload, version

    records = _legacy_records(payload, "user_uploads") + _legacy_records(payload, "user_documents")
    connected = payload.get("digilocker_connected", False)
    if isinstance(connected, str):
        connected = connected.lower() == "true"
    return {
        "schema_version": SCHEMA_VERSION,
        "user": payload.get("user"),
        "digilocker_connected": bool(connected),
        "digilocker_abc_id": payload.get("digilocker_abc_id"),
        "user_documents": [_migrate_legacy_record(r) for r in records],
    }, version


def _document_to_state(doc: Document) -> StateDocument:
    return StateDocument(
        document_id=doc.document_id,
        file_name=doc.file_name,
        doc_type=doc.doc_type,
        upload_date=doc.upload_date,
        source=doc.source,
        status=doc.status,
        confidence_score=display_confidence(doc),
        decided_by=doc.decided_by,
        notes=doc.notes,
        reviewer_notes=doc.reviewer_notes,
        verification_details=load_details(doc),
        issuer=doc.issuer,
        issue_date=doc.issue_date,
    )


def export_state(db: Session, session: LoggedIn) -> StateSnapshot:
    link = db.query(TrustedSourceLink).filter(TrustedSourceLink.user_id == session.id).first()
    docs = db.query(Document).filter(Document.candidate_id == session.id).order_by(Document.created_at.asc()).all()
    return StateSnapshot(
        schema_version=SCHEMA_VERSION,
        user=StateUser(id=session.id, email=session.email, name=session.name, role=session.role),
        digilocker_connected=link is not None,
        digilocker_abc_id=link.abc_id if link else None,
        user_documents=[_document_to_state(d) for d in docs],
    )


def import_state(db: Session, session: LoggedIn, payload: dict) -> dict:
    """Merge a snapshot into the caller's documents. Records already present are skipped."""
    if session.role != "user":
        raise NotAuthorized("Only candidate accounts hold documents to import")

    migrated, original_version = migrate_state(payload)
    try:
        snapshot = StateSnapshot.model_validate(migrated)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        raise ValidationError(
            f"Invalid state snapshot: {first['msg']}",
            field=".".join(str(p) for p in first["loc"]),
        )

    imported = skipped = 0
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    for record in snapshot.user_documents:
        if record.status not in DOCUMENT_STATUSES:
            raise ValidationError(f"Unknown document status {record.status!r}", field="user_documents")
        source = "digilocker" if record.source == "digilocker" else "manual"
        duplicate = db.query(Document).filter(
            Document.candidate_id == session.id,
            Document.file_name == record.file_name,
            Document.upload_date == record.upload_date,
            Document.source == source,
        ).first()
        if duplicate:
            skipped += 1
            continue

        decided_by = record.decided_by
        if record.status != "pending" and decided_by is None:
            decided_by = "trusted_source" if source == "digilocker" else "ai"
        db.add(Document(
            id=str(uuid.uuid4()),
            document_id=generate_document_ref(),
            candidate_id=session.id,
            uploaded_by=session.id,
            file_name=record.file_name,
            doc_type=_normalize_doc_type(record.doc_type),
            upload_date=record.upload_date,
            source=source,
            issuer=record.issuer,
            issue_date=record.issue_date,
            status=record.status,
            confidence_score=0 if record.status == "pending" else max(0, min(100, record.confidence_score or 0)),
            decided_by=None if record.status == "pending" else decided_by,
            notes=record.notes,
            reviewer_notes=record.reviewer_notes,
            verification_details=dump_details(record.verification_details),
            created_at=now,
            updated_at=now,
        ))
        db.flush()  # later records must see this one as a duplicate
        imported += 1

    connected = False
    if snapshot.digilocker_connected and snapshot.digilocker_abc_id:
        link = db.query(TrustedSourceLink).filter(TrustedSourceLink.user_id == session.id).first()
        if link is None:
            db.add(TrustedSourceLink(user_id=session.id, abc_id=snapshot.digilocker_abc_id, connected_at=now))
        else:
            link.abc_id = snapshot.digilocker_abc_id
        connected = True
    elif snapshot.digilocker_connected:
        logger.warning("Snapshot marks DigiLocker connected without an ABC ID; connection not restored")

    db.commit()
    logger.info(
        "Imported state v%d for %s: %d documents, %d skipped", original_version, session.id, imported, skipped
    )
    return {
        "schema_version": SCHEMA_VERSION,
        "migrated_from": original_version,
        "imported": imported,
        "skipped": skipped,
        "digilocker_connected": connected,
    }
