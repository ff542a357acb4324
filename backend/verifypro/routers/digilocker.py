from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from verifypro.database import get_db
from verifypro.dependencies import get_document_source, require_role
from verifypro.gate import LoggedIn
from verifypro.routers.documents import doc_to_response
from verifypro.schemas.digilocker import (
    DigiLockerConnectRequest,
    DigiLockerDocumentResponse,
    DigiLockerImportRequest,
    DigiLockerStatusResponse,
)
from verifypro.schemas.document import DocumentResponse
from verifypro.services import digilocker_service
from verifypro.services.trusted_source import DocumentSource

router = APIRouter(prefix="/digilocker", tags=["digilocker"])


@router.get("/status", response_model=DigiLockerStatusResponse)
async def digilocker_status(candidate: LoggedIn = Depends(require_role("user")), db: Session = Depends(get_db)):
    link = digilocker_service.get_link(db, candidate)
    if link is None:
        return DigiLockerStatusResponse(connected=False)
    return DigiLockerStatusResponse(connected=True, abc_id=link.abc_id, connected_at=link.connected_at)


@router.post("/connect", response_model=DigiLockerStatusResponse)
async def connect_digilocker(
    req: DigiLockerConnectRequest,
    candidate: LoggedIn = Depends(require_role("user")),
    db: Session = Depends(get_db),
    source: DocumentSource = Depends(get_document_source),
):
    link = await digilocker_service.connect(db, candidate, source, req.abc_id)
    return DigiLockerStatusResponse(connected=True, abc_id=link.abc_id, connected_at=link.connected_at)


@router.delete("/connect", response_model=DigiLockerStatusResponse)
async def disconnect_digilocker(candidate: LoggedIn = Depends(require_role("user")), db: Session = Depends(get_db)):
    digilocker_service.disconnect(db, candidate)
    return DigiLockerStatusResponse(connected=False)


@router.get("/documents", response_model=list[DigiLockerDocumentResponse])
async def list_digilocker_documents(
    candidate: LoggedIn = Depends(require_role("user")),
    db: Session = Depends(get_db),
    source: DocumentSource = Depends(get_document_source),
):
    return [
        DigiLockerDocumentResponse(
            id=d.id,
            name=d.name,
            issuer=d.issuer,
            issue_date=d.issue_date,
            category=d.category,
            doc_type=d.doc_type,
            imported=imported,
        )
        for d, imported in await digilocker_service.list_available(db, candidate, source)
    ]


@router.post("/import", response_model=list[DocumentResponse], status_code=201)
async def import_digilocker_documents(
    req: DigiLockerImportRequest,
    candidate: LoggedIn = Depends(require_role("user")),
    db: Session = Depends(get_db),
    source: DocumentSource = Depends(get_document_source),
):
    docs = await digilocker_service.import_documents(db, candidate, source, req.document_ids)
    return [doc_to_response(d, verification_running=False) for d in docs]
