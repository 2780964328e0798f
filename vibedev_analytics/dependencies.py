import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from .config import get_settings
from .services.view_tracker import ViewTracker

logger = logging.getLogger(__name__)

_view_tracker = ViewTracker()


def get_view_tracker() -> ViewTracker:
    return _view_tracker


def require_admin(x_admin_token: Optional[str] = Header(None)):
    """
    Verifica el token de administración.
    Si ADMIN_API_TOKEN no está configurado (desarrollo) no se exige nada.
    """
    expected = get_settings().admin_api_token
    if not expected:
        return
    if x_admin_token != expected:
        logger.warning("Acceso de administración rechazado")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requiere acceso de administrador",
        )
