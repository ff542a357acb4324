from pydantic import BaseModel


class DigiLockerConnectRequest(BaseModel):
    abc_id: str = ""


class DigiLockerStatusResponse(BaseModel):
    connected: bool
    abc_id: str | None = None
    connected_at: str | None = None


class DigiLockerDocumentResponse(BaseModel):
    id: str
    name: str
    issuer: str
    issue_date: str
    category: str
    doc_type: str
    verified: bool = True
    imported: bool


class DigiLockerImportRequest(BaseModel):
    document_ids: list[str] = []
