from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.view_event import CONTENT_ID_MAX_LENGTH, SESSION_ID_MAX_LENGTH, USER_ID_MAX_LENGTH
from ..utils import parse_iso, to_iso

ContentType = Literal["project", "post"]


class ViewSession(BaseModel):
    """
    Sesión de visitante tal como se guarda en localStorage (vibedev_session):
    { "id": "...", "createdAt": "2026-10-19T10:00:00.000Z", "lastActivity": "..." }
    """
    id: str
    created_at: datetime = Field(alias="createdAt")
    last_activity: datetime = Field(alias="lastActivity")

    class Config:
        populate_by_name = True

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("El id de la sesión no puede estar vacío")
        return v.strip()

    @field_validator("created_at", "last_activity", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        if isinstance(v, str):
            return parse_iso(v)
        return v

    def to_storage(self) -> dict:
        """Forma JSON que se guarda del lado del cliente."""
        return {
            "id": self.id,
            "createdAt": to_iso(self.created_at),
            "lastActivity": to_iso(self.last_activity),
        }


class SessionRequest(BaseModel):
    # Registro guardado por el cliente; None si no tiene ninguno
    session: Optional[dict] = None


def _validate_identifier(v: str, max_length: int) -> str:
    if not v or not v.strip():
        raise ValueError("El identificador no puede estar vacío")
    v = v.strip()
    if len(v) > max_length:
        raise ValueError(f"El identificador no puede tener más de {max_length} caracteres")
    return v


class TrackViewRequest(BaseModel):
    content_type: ContentType
    content_id: str
    session_id: str
    user_id: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("content_id")
    @classmethod
    def validate_content_id(cls, v: str) -> str:
        return _validate_identifier(v, CONTENT_ID_MAX_LENGTH)

    @field_validator("session_id")
    @classmethod
    def validate_session_id(cls, v: str) -> str:
        return _validate_identifier(v, SESSION_ID_MAX_LENGTH)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _validate_identifier(v, USER_ID_MAX_LENGTH)


class TrackViewResponse(BaseModel):
    counted: bool


class ViewStats(BaseModel):
    content_type: ContentType
    content_id: str
    total_views: int
    unique_visitors: int
    today_views: int
    weekly_views: int


class PlatformViewStats(BaseModel):
    total_views: int
    unique_sessions: int
    views_today: int
    views_by_type: Dict[str, int]


class MostViewedItem(BaseModel):
    content_type: ContentType
    content_id: str
    views: int
    unique_visitors: int


class MostViewedResponse(BaseModel):
    items: List[MostViewedItem]


class ViewsTimeSeries(BaseModel):
    dates: List[str]
    views: List[int]


class DeleteViewsResponse(BaseModel):
    deleted: int
