# Importar todos los modelos para que SQLAlchemy los registre antes de create_all()
from .view_event import ViewEvent, CONTENT_TYPES, CONTENT_TYPE_POST, CONTENT_TYPE_PROJECT
from .visitor_session import VisitorSession

__all__ = [
    "ViewEvent",
    "VisitorSession",
    "CONTENT_TYPES",
    "CONTENT_TYPE_POST",
    "CONTENT_TYPE_PROJECT",
]
