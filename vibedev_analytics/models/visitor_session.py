from sqlalchemy import Column, Integer, String, DateTime

from ..database import Base
from ..utils import utc_now
from .view_event import SESSION_ID_MAX_LENGTH


class VisitorSession(Base):
    """
    Registra las sesiones de visitantes que generaron al menos una vista.
    El frontend identifica cada sesión con un id guardado en localStorage (vibedev_session).
    """
    __tablename__ = "visitor_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(SESSION_ID_MAX_LENGTH), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    last_activity = Column(DateTime, default=utc_now, nullable=False)
    user_agent = Column(String(500), nullable=True)
