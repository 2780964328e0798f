from sqlalchemy import Column, Integer, String, DateTime, Index

from ..database import Base
from ..utils import utc_now

CONTENT_TYPE_PROJECT = "project"
CONTENT_TYPE_POST = "post"
CONTENT_TYPES = (CONTENT_TYPE_PROJECT, CONTENT_TYPE_POST)

CONTENT_ID_MAX_LENGTH = 200
SESSION_ID_MAX_LENGTH = 100
USER_ID_MAX_LENGTH = 100


class ViewEvent(Base):
    """
    Una vista contabilizada de un proyecto o post.
    Se crea una sola vez por (sesión, contenido); no hay restricción única en la tabla.
    """
    __tablename__ = "view_events"
    __table_args__ = (
        Index("ix_view_events_content", "content_type", "content_id"),
        Index("ix_view_events_session_content", "session_id", "content_type", "content_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content_type = Column(String(20), nullable=False)  # project, post
    content_id = Column(String(CONTENT_ID_MAX_LENGTH), nullable=False)
    session_id = Column(String(SESSION_ID_MAX_LENGTH), nullable=False, index=True)
    # Usuario autenticado (si lo hay); solo informativo, no participa en la deduplicación
    user_id = Column(String(USER_ID_MAX_LENGTH), nullable=True)
    view_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD (UTC)
    created_at = Column(DateTime, default=utc_now, nullable=False)
