"""
Script para simular visitas a un proyecto y ver cómo quedan los contadores.
Usa un archivo JSON como si fuera el localStorage del navegador.

Ejecutar: python scripts/simulate_views.py mi-proyecto
"""
import argparse
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(BACKEND_DIR))

from vibedev_analytics.database import Base, SessionLocal, engine  # noqa: E402
from vibedev_analytics.services.session_manager import JsonFileSessionStore, SessionManager  # noqa: E402
from vibedev_analytics.services.view_stats import get_view_stats  # noqa: E402
from vibedev_analytics.services.view_tracker import ViewTracker  # noqa: E402

BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
BOT_UA = "Googlebot/2.1 (+http://www.google.com/bot.html)"


def simulate(project_id: str, visitors: int, reloads: int, storage_dir: Path):
    Base.metadata.create_all(bind=engine)
    tracker = ViewTracker()
    db = SessionLocal()

    try:
        for i in range(visitors):
            # Cada visitante tiene su propio "navegador"
            store = JsonFileSessionStore(storage_dir / f"visitor_{i}.json")
            manager = SessionManager(store)
            for _ in range(reloads):
                session_id = manager.current_session_id()
                result = tracker.record_view(db, session_id, "project", project_id, BROWSER_UA)
                print(f"👤 visitante {i} (sesión {session_id[:8]}...): {'contada' if result.counted else 'repetida'}")

        result = tracker.record_view(db, "bot-session", "project", project_id, BOT_UA)
        print(f"🤖 bot: {'contada' if result.counted else 'ignorada'}")

        stats = get_view_stats(db, "project", project_id)
        print("\n📋 Estadísticas:")
        print(f"   - Vistas totales: {stats.total_views}")
        print(f"   - Visitantes únicos: {stats.unique_visitors}")
        print(f"   - Vistas de hoy: {stats.today_views}")
        print(f"   - Vistas de la semana: {stats.weekly_views}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simula visitas a un proyecto")
    parser.add_argument("project_id")
    parser.add_argument("--visitors", type=int, default=3)
    parser.add_argument("--reloads", type=int, default=2)
    parser.add_argument("--storage-dir", default=os.path.join(BACKEND_DIR, ".simulated_browsers"))
    args = parser.parse_args()

    simulate(args.project_id, args.visitors, args.reloads, Path(args.storage_dir))
