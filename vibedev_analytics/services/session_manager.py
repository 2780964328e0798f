"""
Manejo de la sesión del visitante para el conteo de vistas únicas.

La sesión vive del lado del cliente (localStorage en el navegador). Acá se modela
con un SessionStore inyectable para poder aplicar la misma regla de expiración
(30 minutos de inactividad) en el servidor, en scripts y en los tests.
"""
import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..config import get_settings
from ..schemas.view_schema import ViewSession
from ..utils import utc_now

logger = logging.getLogger(__name__)

SESSION_KEY = "vibedev_session"
VIEWED_CONTENT_KEY = "vibedev_viewed_projects"


class SessionStore(ABC):
    """Almacenamiento clave/valor de strings (equivalente a localStorage)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileSessionStore(SessionStore):
    """Guarda todas las claves en un único archivo JSON."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def generate_session_id() -> str:
    return str(uuid.uuid4())


def load_viewed_content(store: SessionStore) -> Dict[str, List[str]]:
    """Lee el mapa sessionId -> [contenidos vistos] (vibedev_viewed_projects)."""
    stored = store.get(VIEWED_CONTENT_KEY)
    viewed = json.loads(stored) if stored else {}
    return viewed if isinstance(viewed, dict) else {}


def save_viewed_content(store: SessionStore, viewed: Dict[str, List[str]], current_session_id: str) -> None:
    # Solo se conserva la sesión actual cuando se acumulan más de dos
    if len(viewed) > 2:
        viewed = {current_session_id: viewed.get(current_session_id, [])}
    store.set(VIEWED_CONTENT_KEY, json.dumps(viewed))


def is_session_active(session: ViewSession, now: datetime, timeout: timedelta) -> bool:
    """Una sesión es válida mientras now - lastActivity < timeout."""
    return now - session.last_activity < timeout


class SessionManager:
    def __init__(
        self,
        store: SessionStore,
        timeout: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_session_id,
    ):
        if timeout is None:
            timeout = timedelta(minutes=get_settings().session_timeout_minutes)
        self.store = store
        self.timeout = timeout
        self.clock = clock
        self.id_factory = id_factory

    def _load_session(self) -> Optional[ViewSession]:
        stored = self.store.get(SESSION_KEY)
        if not stored:
            return None
        try:
            return ViewSession.model_validate(json.loads(stored))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Sesión guardada inválida, se crea una nueva: {e}")
            return None

    def get_or_create_session(self) -> ViewSession:
        """
        Devuelve la sesión actual con lastActivity actualizado.
        Si no existe o expiró, crea una nueva y la guarda reemplazando la anterior.
        Si el almacenamiento falla, devuelve una sesión nueva sin guardar.
        """
        now = self.clock()

        try:
            session = self._load_session()
            if session is not None and is_session_active(session, now, self.timeout):
                session.last_activity = now
                self.store.set(SESSION_KEY, json.dumps(session.to_storage()))
                return session
        except Exception as e:
            logger.warning(f"No se pudo leer la sesión guardada: {e}")

        new_session = ViewSession(id=self.id_factory(), created_at=now, last_activity=now)

        try:
            self.store.set(SESSION_KEY, json.dumps(new_session.to_storage()))
        except Exception as e:
            logger.warning(f"No se pudo guardar la sesión: {e}")

        return new_session

    def current_session_id(self) -> str:
        return self.get_or_create_session().id

    def should_track_view(self, content_key: str) -> bool:
        """
        Dedup del lado del cliente: True si es la primera vista de content_key
        en la sesión actual. Ante un error de almacenamiento se cuenta igual.
        """
        session = self.get_or_create_session()

        try:
            viewed = load_viewed_content(self.store)

            session_views = viewed.get(session.id) or []
            if content_key in session_views:
                return False

            viewed[session.id] = [*session_views, content_key]
            save_viewed_content(self.store, viewed, session.id)
            return True
        except Exception as e:
            logger.warning(f"No se pudo registrar la vista en la sesión: {e}")
            return True

    def clear_session(self) -> None:
        try:
            self.store.clear(SESSION_KEY)
            self.store.clear(VIEWED_CONTENT_KEY)
        except Exception as e:
            logger.warning(f"No se pudo limpiar la sesión: {e}")
