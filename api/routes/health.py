"""Health check routes"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from api.responses import HealthResponse
from app.config import settings
from domain.models import get_db_session

router = APIRouter(tags=["Health"])
logger = logging.getLogger("pantrymind.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check(request: Request, db: Session = Depends(get_db_session)):
    """Liveness plus database reachability and the active LLM provider."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning("Health check could not reach the database: %s", e)
        database = "unavailable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        database=database,
        llm_provider=request.app.state.llm_service.current_provider(),
    )
