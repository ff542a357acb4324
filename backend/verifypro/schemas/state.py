from pydantic import BaseModel


class StateUser(BaseModel):
    id: str
    email: str
    name: str
    role: str


class StateDocument(BaseModel):
    document_id: str | None = None
    file_name: str
    doc_type: str = "other"
    upload_date: str
    source: str = "manual"
    status: str = "pending"
    confidence_score: int | None = None
    decided_by: str | None = None
    notes: str | None = None
    reviewer_notes: str | None = None
    verification_details: dict | None = None
    issuer: str | None = None
    issue_date: str | None = None


class StateSnapshot(BaseModel):
    schema_version: int
    user: StateUser | None = None
    digilocker_connected: bool = False
    digilocker_abc_id: str | None = None
    user_documents: list[StateDocument] = []


class StateImportResponse(BaseModel):
    schema_version: int
    migrated_from: int
    imported: int
    skipped: int
    digilocker_connected: bool
