from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from verifypro.config import settings
from verifypro.database import get_db
from verifypro.dependencies import require_session
from verifypro.gate import LoggedIn
from verifypro.schemas.dashboard import DashboardSummary
from verifypro.services import document_service, request_service
from verifypro.services.filters import summarize

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary(session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    docs = document_service.list_documents(db, session)
    requests = request_service.list_requests(db, session)
    return DashboardSummary(
        **summarize(docs, requests, datetime.now(timezone.utc), settings.urgency_threshold_days)
    )
