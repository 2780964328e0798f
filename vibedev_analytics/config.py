import os
from typing import List

# Patrones de user agent que consideramos bots/crawlers
DEFAULT_BOT_PATTERNS = [
    "bot",
    "crawler",
    "spider",
    "scraper",
    "googlebot",
    "bingbot",
    "slurp",
    "duckduckbot",
    "facebookexternalhit",
    "twitterbot",
    "whatsapp",
]


class Settings:
    """Configuración de la aplicación que lee variables de entorno dinámicamente."""

    @property
    def app_name(self) -> str:
        return "Vibedev Analytics"

    @property
    def environment(self) -> str:
        env = os.getenv("ENV", "").lower()
        if env == "production" or os.getenv("PORT"):
            return "production"
        return "development"

    @property
    def cors_origin(self) -> str:
        return os.getenv("CORS_ORIGIN", "http://localhost:3000")

    @property
    def database_url(self) -> str:
        return os.getenv("DATABASE_URL", "").strip()

    @property
    def session_timeout_minutes(self) -> int:
        raw = os.getenv("SESSION_TIMEOUT_MINUTES", "").strip()
        try:
            value = int(raw) if raw else 30
        except ValueError:
            return 30
        return value if value > 0 else 30

    @property
    def bot_user_agent_patterns(self) -> List[str]:
        extra = os.getenv("BOT_USER_AGENT_PATTERNS", "")
        patterns = list(DEFAULT_BOT_PATTERNS)
        for pattern in extra.split(","):
            pattern = pattern.strip().lower()
            if pattern and pattern not in patterns:
                patterns.append(pattern)
        return patterns

    @property
    def admin_api_token(self) -> str:
        return os.getenv("ADMIN_API_TOKEN", "")


# Instancia singleton de Settings (sin cache, lee valores dinámicamente)
_settings_instance = None


def get_settings() -> Settings:
    """Retorna la instancia de Settings. Lee variables de entorno dinámicamente."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def clear_settings_cache():
    """Limpia la instancia de settings (aunque no es necesario con propiedades dinámicas)."""
    global _settings_instance
    _settings_instance = None
