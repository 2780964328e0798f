"""
Contadores de vistas calculados a partir de las filas de view_events.
No hay cache ni contadores incrementales: cada lectura recalcula sobre todos los eventos.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from ..models.view_event import ViewEvent, CONTENT_TYPES
from ..schemas.view_schema import (
    MostViewedItem,
    PlatformViewStats,
    ViewStats,
    ViewsTimeSeries,
)
from ..utils import analytics_date, utc_now

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


def _content_query(db: Session, column, content_type: str, content_id: str):
    return db.query(column).filter(
        ViewEvent.content_type == content_type,
        ViewEvent.content_id == content_id,
    )


def total_views(db: Session, content_type: str, content_id: str) -> int:
    return _content_query(db, func.count(ViewEvent.id), content_type, content_id).scalar() or 0


def unique_visitors(db: Session, content_type: str, content_id: str) -> int:
    return _content_query(
        db, func.count(func.distinct(ViewEvent.session_id)), content_type, content_id
    ).scalar() or 0


def today_views(db: Session, content_type: str, content_id: str, now: Optional[datetime] = None) -> int:
    today = analytics_date(now)
    return _content_query(db, func.count(ViewEvent.id), content_type, content_id).filter(
        ViewEvent.view_date == today
    ).scalar() or 0


def weekly_views(db: Session, content_type: str, content_id: str, now: Optional[datetime] = None) -> int:
    """Vistas de los últimos 7 días calendario, hoy incluido."""
    now = now or utc_now()
    from_date = analytics_date(now - timedelta(days=WEEK_DAYS - 1))
    return _content_query(db, func.count(ViewEvent.id), content_type, content_id).filter(
        ViewEvent.view_date >= from_date,
        ViewEvent.view_date <= analytics_date(now),
    ).scalar() or 0


def get_view_stats(
    db: Session,
    content_type: str,
    content_id: str,
    clock: Callable[[], datetime] = utc_now,
) -> ViewStats:
    now = clock()
    return ViewStats(
        content_type=content_type,
        content_id=content_id,
        total_views=total_views(db, content_type, content_id),
        unique_visitors=unique_visitors(db, content_type, content_id),
        today_views=today_views(db, content_type, content_id, now),
        weekly_views=weekly_views(db, content_type, content_id, now),
    )


# --- Analítica para el panel de administración ---

def get_platform_view_stats(db: Session, clock: Callable[[], datetime] = utc_now) -> PlatformViewStats:
    today = analytics_date(clock())

    total = db.query(func.count(ViewEvent.id)).scalar() or 0
    sessions = db.query(func.count(func.distinct(ViewEvent.session_id))).scalar() or 0
    views_today = db.query(func.count(ViewEvent.id)).filter(ViewEvent.view_date == today).scalar() or 0

    views_by_type = {content_type: 0 for content_type in CONTENT_TYPES}
    rows = (
        db.query(ViewEvent.content_type, func.count(ViewEvent.id))
        .group_by(ViewEvent.content_type)
        .all()
    )
    for content_type, count in rows:
        views_by_type[content_type] = count or 0

    return PlatformViewStats(
        total_views=total,
        unique_sessions=sessions,
        views_today=views_today,
        views_by_type=views_by_type,
    )


def get_most_viewed(db: Session, content_type: str, limit: int = 10) -> List[MostViewedItem]:
    """Contenidos con más vistas (desempate por id de contenido)."""
    limit = limit if limit > 0 else 10
    views_count = func.count(ViewEvent.id).label("views")
    rows = (
        db.query(
            ViewEvent.content_id,
            views_count,
            func.count(func.distinct(ViewEvent.session_id)).label("unique_visitors"),
        )
        .filter(ViewEvent.content_type == content_type)
        .group_by(ViewEvent.content_id)
        .order_by(desc(views_count), ViewEvent.content_id)
        .limit(limit)
        .all()
    )
    return [
        MostViewedItem(
            content_type=content_type,
            content_id=row.content_id,
            views=row.views or 0,
            unique_visitors=row.unique_visitors or 0,
        )
        for row in rows
    ]


def get_views_time_series(
    db: Session,
    days: int = 30,
    clock: Callable[[], datetime] = utc_now,
) -> ViewsTimeSeries:
    """Vistas por día para los últimos `days` días (terminando hoy), con ceros en los días sin vistas."""
    days = days if days > 0 else 30
    now = clock()
    dates = [analytics_date(now - timedelta(days=i)) for i in range(days - 1, -1, -1)]

    rows = (
        db.query(ViewEvent.view_date, func.count(ViewEvent.id))
        .filter(ViewEvent.view_date >= dates[0], ViewEvent.view_date <= dates[-1])
        .group_by(ViewEvent.view_date)
        .all()
    )
    counts = {view_date: count for view_date, count in rows}

    return ViewsTimeSeries(dates=dates, views=[counts.get(d, 0) for d in dates])


def delete_content_views(db: Session, content_type: str, content_id: str) -> int:
    """Elimina todas las vistas de un contenido (al borrar un proyecto o post)."""
    try:
        deleted = (
            db.query(ViewEvent)
            .filter(ViewEvent.content_type == content_type, ViewEvent.content_id == content_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Vistas eliminadas de {content_type}/{content_id}: {deleted}")
        return deleted
    except Exception:
        db.rollback()
        raise
