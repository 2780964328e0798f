"""
Router para el seguimiento de vistas de proyectos y posts
"""
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_view_tracker, require_admin
from ..schemas.view_schema import (
    ContentType,
    DeleteViewsResponse,
    SessionRequest,
    TrackViewRequest,
    TrackViewResponse,
    ViewStats,
)
from ..services.session_manager import MemorySessionStore, SessionManager, SESSION_KEY
from ..services.view_stats import delete_content_views, get_view_stats
from ..services.view_tracker import ViewTracker

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/views", tags=["views"])


@router.post("/session")
def refresh_session(request: SessionRequest):
    """
    Recibe la sesión guardada por el cliente (o ninguna) y devuelve la sesión vigente:
    la misma con lastActivity actualizado, o una nueva si expiró o era inválida.
    """
    store = MemorySessionStore()
    if request.session:
        store.set(SESSION_KEY, json.dumps(request.session))

    session = SessionManager(store).get_or_create_session()
    return session.to_storage()


@router.post("/track", response_model=TrackViewResponse)
def track_view(
    payload: TrackViewRequest,
    request: Request,
    db: Session = Depends(get_db),
    tracker: ViewTracker = Depends(get_view_tracker),
):
    """
    Registra la vista de un proyecto o post.
    Siempre responde 200: si la escritura falla la vista simplemente no se cuenta.
    """
    user_agent = payload.user_agent or request.headers.get("user-agent")
    return tracker.record_view(
        db,
        session_id=payload.session_id,
        content_type=payload.content_type,
        content_id=payload.content_id,
        user_agent=user_agent,
        user_id=payload.user_id,
    )


@router.get("/{content_type}/{content_id}/stats", response_model=ViewStats)
def get_content_stats(
    content_type: ContentType,
    content_id: str,
    db: Session = Depends(get_db),
):
    """Total de vistas, visitantes únicos, vistas de hoy y de la semana."""
    try:
        return get_view_stats(db, content_type, content_id)
    except Exception as e:
        logger.error(f"Error al obtener estadísticas de {content_type}/{content_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al obtener las estadísticas de vistas",
        )


@router.delete(
    "/{content_type}/{content_id}",
    response_model=DeleteViewsResponse,
    dependencies=[Depends(require_admin)],
)
def delete_views(
    content_type: ContentType,
    content_id: str,
    db: Session = Depends(get_db),
):
    """Elimina las vistas de un contenido (usado al borrar un proyecto o post desde el admin)."""
    try:
        deleted = delete_content_views(db, content_type, content_id)
        return DeleteViewsResponse(deleted=deleted)
    except Exception as e:
        logger.error(f"Error al eliminar vistas de {content_type}/{content_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al eliminar las vistas",
        )
