from pydantic import BaseModel


class DocumentRequestCreate(BaseModel):
    doc_type: str | None = None
    candidate_id: str | None = None
    candidate_email: str | None = None
    notes: str | None = None
    due_date: str | None = None


class DocumentRequestResponse(BaseModel):
    id: str
    requester_id: str
    candidate_id: str
    doc_type: str
    doc_type_label: str
    notes: str | None
    request_date: str
    due_date: str | None
    status: str
    urgent: bool
    fulfilled_document_id: str | None
    fulfilled_at: str | None
