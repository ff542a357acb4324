import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from verifypro.errors import InvalidStateTransition
from verifypro.gate import LoggedIn
from verifypro.models.document import Document
from verifypro.models.trusted_source import TrustedSourceLink
from verifypro.services import document_service
from verifypro.services.trusted_source import DocumentSource, SourceDocument

logger = logging.getLogger(__name__)


def get_link(db: Session, candidate: LoggedIn) -> TrustedSourceLink | None:
    return db.query(TrustedSourceLink).filter(TrustedSourceLink.user_id == candidate.id).first()


def _require_link(db: Session, candidate: LoggedIn) -> TrustedSourceLink:
    link = get_link(db, candidate)
    if link is None:
        raise InvalidStateTransition("Connect DigiLocker first")
    return link


async def connect(db: Session, candidate: LoggedIn, source: DocumentSource, abc_id: str) -> TrustedSourceLink:
    await source.connect(abc_id)
    abc_id = abc_id.strip()
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    link = get_link(db, candidate)
    if link:
        link.abc_id = abc_id
        link.connected_at = now
    else:
        link = TrustedSourceLink(user_id=candidate.id, abc_id=abc_id, connected_at=now)
        db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("%s connected for %s", source.name, candidate.id)
    return link


def disconnect(db: Session, candidate: LoggedIn) -> bool:
    link = get_link(db, candidate)
    if link is None:
        return False
    db.delete(link)
    db.commit()
    logger.info("DigiLocker disconnected for %s", candidate.id)
    return True


async def list_available(db: Session, candidate: LoggedIn, source: DocumentSource) -> list[tuple[SourceDocument, bool]]:
    """Source documents paired with whether they were already imported."""
    link = _require_link(db, candidate)
    imported = {
        (name, issuer)
        for name, issuer in db.query(Document.file_name, Document.issuer).filter(
            Document.candidate_id == candidate.id,
            Document.source == "digilocker",
        )
    }
    return [(d, (d.name, d.issuer) in imported) for d in await source.list_documents(link.abc_id)]


async def import_documents(
    db: Session, candidate: LoggedIn, source: DocumentSource, document_ids: list[str]
) -> list[Document]:
    link = _require_link(db, candidate)
    return await document_service.import_from_trusted_source(db, candidate, source, link.abc_id, document_ids)
