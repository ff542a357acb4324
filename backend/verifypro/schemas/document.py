from pydantic import BaseModel


class DocumentResponse(BaseModel):
    id: str
    document_id: str
    candidate_id: str
    uploaded_by: str
    file_name: str
    doc_type: str
    doc_type_label: str
    mime_type: str | None
    file_size_bytes: int | None
    file_hash: str | None
    upload_date: str
    source: str
    issuer: str | None
    issue_date: str | None
    status: str
    confidence_score: int | None
    recommendation: str | None
    decided_by: str | None
    notes: str | None
    reviewer_notes: str | None
    verification_details: dict | None = None
    request_id: str | None
    verification_running: bool = False
    created_at: str
    updated_at: str


class DecisionRequest(BaseModel):
    decision: str
    notes: str | None = None
