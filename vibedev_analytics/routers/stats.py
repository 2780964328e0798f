import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..schemas.view_schema import (
    ContentType,
    MostViewedResponse,
    PlatformViewStats,
    ViewsTimeSeries,
)
from ..services.view_stats import (
    get_most_viewed,
    get_platform_view_stats,
    get_views_time_series,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"], dependencies=[Depends(require_admin)])


@router.get("/views", response_model=PlatformViewStats)
def get_platform_views(db: Session = Depends(get_db)):
    """
    Estadísticas de vistas de toda la plataforma para el dashboard de administración.
    """
    try:
        return get_platform_view_stats(db)
    except Exception as e:
        logger.error(f"Error al obtener estadísticas de la plataforma: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al obtener estadísticas de la plataforma",
        )


@router.get("/most-viewed", response_model=MostViewedResponse)
def get_most_viewed_content(
    content_type: ContentType = "project",
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Ranking de contenidos más vistos.
    - content_type: project o post (por defecto project)
    - limit: cantidad máxima de resultados (por defecto 10)
    """
    try:
        return MostViewedResponse(items=get_most_viewed(db, content_type, limit))
    except Exception as e:
        logger.error(f"Error al obtener ranking de vistas: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al obtener el ranking de vistas",
        )


@router.get("/time-series", response_model=ViewsTimeSeries)
def get_time_series(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Serie diaria de vistas de los últimos `days` días."""
    try:
        return get_views_time_series(db, days)
    except Exception as e:
        logger.error(f"Error al calcular serie de vistas: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al calcular la serie de vistas",
        )
