from pydantic import BaseModel


class DashboardSummary(BaseModel):
    total_documents: int
    by_status: dict[str, int]
    trusted_imports: int
    average_confidence: float | None
    open_requests: int
    urgent_requests: int
