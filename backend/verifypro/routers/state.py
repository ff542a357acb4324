from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from verifypro.database import get_db
from verifypro.dependencies import require_session
from verifypro.gate import LoggedIn
from verifypro.schemas.state import StateImportResponse, StateSnapshot
from verifypro.services import state_service

router = APIRouter(prefix="/state", tags=["state"])


@router.get("/export", response_model=StateSnapshot)
async def export_state(session: LoggedIn = Depends(require_session), db: Session = Depends(get_db)):
    return state_service.export_state(db, session)


@router.post("/import", response_model=StateImportResponse)
async def import_state(
    payload: dict = Body(...),
    session: LoggedIn = Depends(require_session),
    db: Session = Depends(get_db),
):
    """Import a snapshot, including the unversioned layout of the browser demo."""
    return StateImportResponse(**state_service.import_state(db, session, payload))
