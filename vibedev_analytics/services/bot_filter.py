"""
Filtro simple de bots/crawlers por user agent.
No es una barrera de seguridad: solo evita que los crawlers inflen las estadísticas.
"""
from typing import Iterable, Optional

from ..config import get_settings


def is_bot_user_agent(user_agent: Optional[str], patterns: Optional[Iterable[str]] = None) -> bool:
    """
    True si el user agent coincide con algún patrón conocido de bot.
    Un user agent vacío o ausente NO se considera bot (se cuenta la vista).

    Ejemplos:
    - "Googlebot/2.1 (+http://www.google.com/bot.html)" -> True
    - "Mozilla/5.0 (Windows NT 10.0; Win64; x64) ..." -> False
    """
    if not user_agent or not user_agent.strip():
        return False

    if patterns is None:
        patterns = get_settings().bot_user_agent_patterns

    ua = user_agent.lower()
    return any(pattern in ua for pattern in patterns)
