"""
Deduplicación de vistas por sesión.

Una vista se cuenta una sola vez por (sesión, tipo de contenido, contenido) durante
toda la vida de la sesión; el día no forma parte de la clave. No se toma ningún
lock entre la lectura y la escritura, así que dos cargas simultáneas de la misma
sesión pueden llegar a contar dos veces.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.view_event import ViewEvent
from ..models.visitor_session import VisitorSession
from ..schemas.view_schema import TrackViewResponse
from ..utils import analytics_date, utc_now
from .bot_filter import is_bot_user_agent
from .session_manager import SessionStore, load_viewed_content, save_viewed_content

logger = logging.getLogger(__name__)


def content_key(content_type: str, content_id: str) -> str:
    """Clave del contenido dentro del set de vistos (ej: 'project:mi-proyecto')."""
    return f"{content_type}:{content_id}"


class ViewedContentSet(ABC):
    """Contenidos ya contados por cada sesión."""

    @abstractmethod
    def contains(self, db: Session, session_id: str, content_type: str, content_id: str) -> bool:
        ...

    @abstractmethod
    def add(self, db: Session, session_id: str, content_type: str, content_id: str) -> None:
        ...


class DatabaseViewedContent(ViewedContentSet):
    """
    Set derivado de las filas de view_events: un contenido está "visto" por una
    sesión si ya existe un ViewEvent para ese par. El alta en el set es la propia
    fila que inserta el tracker, por eso add() no escribe nada.
    """

    def contains(self, db: Session, session_id: str, content_type: str, content_id: str) -> bool:
        existing = db.query(ViewEvent.id).filter(
            ViewEvent.session_id == session_id,
            ViewEvent.content_type == content_type,
            ViewEvent.content_id == content_id,
        ).first()
        return existing is not None

    def add(self, db: Session, session_id: str, content_type: str, content_id: str) -> None:
        return None


class ClientViewedContent(ViewedContentSet):
    """Set guardado en un SessionStore con la forma de vibedev_viewed_projects."""

    def __init__(self, store: SessionStore):
        self.store = store

    def contains(self, db: Session, session_id: str, content_type: str, content_id: str) -> bool:
        viewed = load_viewed_content(self.store)
        return content_key(content_type, content_id) in (viewed.get(session_id) or [])

    def add(self, db: Session, session_id: str, content_type: str, content_id: str) -> None:
        viewed = load_viewed_content(self.store)
        session_views = viewed.get(session_id) or []
        key = content_key(content_type, content_id)
        if key not in session_views:
            viewed[session_id] = [*session_views, key]
        save_viewed_content(self.store, viewed, session_id)


class ViewTracker:
    def __init__(
        self,
        viewed: Optional[ViewedContentSet] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.viewed = viewed or DatabaseViewedContent()
        self.clock = clock

    def record_view(
        self,
        db: Session,
        session_id: str,
        content_type: str,
        content_id: str,
        user_agent: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> TrackViewResponse:
        """
        Decide si una carga de página cuenta como vista y, si corresponde, la guarda.
        - Bots: no se cuenta y no hay efectos secundarios.
        - Contenido ya visto en la sesión: no se cuenta.
        - Si falla la escritura en la base de datos la vista se descarta (se loguea).
        """
        if is_bot_user_agent(user_agent):
            logger.info(f"Vista ignorada (bot): {content_type}/{content_id}")
            return TrackViewResponse(counted=False)

        now = self.clock()

        try:
            if self.viewed.contains(db, session_id, content_type, content_id):
                return TrackViewResponse(counted=False)

            view = ViewEvent(
                content_type=content_type,
                content_id=content_id,
                session_id=session_id,
                user_id=user_id,
                view_date=analytics_date(now),
                created_at=now,
            )
            db.add(view)
            db.commit()
            logger.info(f"Vista registrada: {content_type}/{content_id} (sesión {session_id[:8]}...)")
        except Exception as e:
            db.rollback()
            logger.error(f"Error al registrar vista de {content_type}/{content_id}: {e}", exc_info=True)
            return TrackViewResponse(counted=False)

        # Se marca como vista recién después de guardar el evento
        try:
            self.viewed.add(db, session_id, content_type, content_id)
        except Exception as e:
            logger.warning(f"No se pudo marcar {content_type}/{content_id} como visto: {e}")

        self._touch_session(db, session_id, user_agent, now)
        return TrackViewResponse(counted=True)

    def _touch_session(self, db: Session, session_id: str, user_agent: Optional[str], now: datetime) -> None:
        """Crea o actualiza el VisitorSession. Un fallo acá no descuenta la vista ya guardada."""
        try:
            visitor = db.query(VisitorSession).filter(VisitorSession.session_id == session_id).first()
            if visitor:
                visitor.last_activity = now
                if user_agent and not visitor.user_agent:
                    visitor.user_agent = user_agent[:500]
            else:
                db.add(VisitorSession(
                    session_id=session_id,
                    created_at=now,
                    last_activity=now,
                    user_agent=user_agent[:500] if user_agent else None,
                ))
            db.commit()
        except IntegrityError:
            # Otra request creó la sesión al mismo tiempo
            db.rollback()
            logger.warning(f"Sesión {session_id[:8]}... ya registrada por otra request")
        except Exception as e:
            db.rollback()
            logger.warning(f"No se pudo actualizar la sesión {session_id[:8]}...: {e}")
