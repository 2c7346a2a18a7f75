"""
Route de santé.

GET /health -> 200 si toutes les dépendances sont ok (ou non configurées), 503 sinon.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from formalis.api.v1.health.services import run_checks
from formalis.database.session_rls import get_db_no_rls

router = APIRouter(tags=["Santé"])


@router.get("/health", summary="État des dépendances")
def health(db: Session = Depends(get_db_no_rls)):
    report = run_checks(db)
    status_code = status.HTTP_200_OK if report.healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=report.model_dump(exclude_none=True))
