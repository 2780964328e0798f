from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Fecha/hora actual en UTC, sin tzinfo (así se guarda en la base de datos)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def analytics_date(value: Optional[datetime] = None) -> str:
    """
    Fecha de analítica en formato YYYY-MM-DD (día calendario UTC).

    Ejemplos:
    - datetime(2026, 10, 19, 23, 59) -> "2026-10-19"
    """
    value = value or utc_now()
    return value.strftime("%Y-%m-%d")


def to_iso(value: datetime) -> str:
    """
    Serializa un datetime UTC con milisegundos y sufijo Z,
    igual que Date.toISOString() en el navegador.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def parse_iso(value: str) -> datetime:
    """Parsea un timestamp ISO-8601 y lo normaliza a UTC sin tzinfo."""
    if not value:
        raise ValueError("Timestamp vacío")
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
