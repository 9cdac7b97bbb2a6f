"""Dependency injection for the analysis API."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status

from analysis_hub.agent.analysis_agent import AnalysisService, get_analysis_service
from analysis_hub.session.controller import SessionController
from analysis_hub.session.state import AnalysisSession
from analysis_hub.session.store import SessionStore, get_session_store

logger = logging.getLogger(__name__)


def get_service() -> AnalysisService:
    """Get the analysis service, reporting missing configuration as 503."""
    try:
        return get_analysis_service()
    except ValueError as e:
        logger.error(f"Analysis service is not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="The AI service is not configured. Set LLM_API_KEY and restart.",
        ) from e


StoreDep = Annotated[SessionStore, Depends(get_session_store)]
ServiceDep = Annotated[AnalysisService, Depends(get_service)]


def get_session(session_id: str, store: StoreDep) -> AnalysisSession:
    """Resolve the session named in the path."""
    return store.get(session_id)


SessionDep = Annotated[AnalysisSession, Depends(get_session)]


def get_controller(session: SessionDep, service: ServiceDep) -> SessionController:
    """Build a controller for the session named in the path."""
    return SessionController(session, service)


ControllerDep = Annotated[SessionController, Depends(get_controller)]
