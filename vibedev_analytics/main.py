import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import inspect

from .routers import stats, views
from .config import get_settings, clear_settings_cache
from .database import Base, engine, fix_sequences

# Configurar logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Cargar variables de entorno desde .env (solo en desarrollo local)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
loaded = load_dotenv(dotenv_path=env_path)
if loaded:
    logger.info(f"Variables de entorno cargadas desde: {env_path}")
else:
    logger.warning(f"No se pudo cargar archivo .env desde: {env_path}")

clear_settings_cache()

# Importar todos los modelos para que SQLAlchemy los registre antes de create_all()
from .models.view_event import ViewEvent  # noqa: F401,E402
from .models.visitor_session import VisitorSession  # noqa: F401,E402

app_settings = get_settings()

app = FastAPI(title="Vibedev Analytics", version="0.1.0", redirect_slashes=False)

allowed_origins = [
    "http://localhost:3000",
]

cors_origin_env = os.getenv("CORS_ORIGIN", "")
cors_origin_configured = cors_origin_env and cors_origin_env != "http://localhost:3000"

# Permitir múltiples orígenes separados por coma
if cors_origin_configured:
    for origin in (o.strip() for o in cors_origin_env.split(",")):
        if origin and origin not in allowed_origins:
            allowed_origins.append(origin)

if app_settings.environment == "production" and not cors_origin_configured:
    logger.warning("⚠️ CORS_ORIGIN no configurado en producción, permitiendo todos los orígenes")
    allowed_origins = ["*"]

logger.info(f"🌐 Orígenes CORS permitidos: {allowed_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials="*" not in allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def create_tables():
    """Crea las tablas en la base de datos si no existen."""
    try:
        expected_tables = list(Base.metadata.tables.keys())
        logger.info(f"Creando tablas en la base de datos: {', '.join(expected_tables)}")

        Base.metadata.create_all(bind=engine)

        existing_tables = inspect(engine).get_table_names()
        missing_tables = [t for t in expected_tables if t not in existing_tables]
        if missing_tables:
            logger.warning(f"⚠️  Tablas faltantes: {', '.join(missing_tables)}")
        else:
            logger.info("✅ Todas las tablas fueron creadas/verificadas exitosamente")

    except Exception as e:
        logger.error(f"❌ ERROR al crear tablas: {str(e)}", exc_info=True)
        raise


# Crear tablas al iniciar (no bloquear el inicio si falla)
try:
    create_tables()
    fix_sequences()
except Exception as e:
    logger.error(f"❌ Error al crear tablas al iniciar: {str(e)}", exc_info=True)
    logger.warning("⚠️ El servidor continuará iniciando, pero el registro de vistas puede no estar disponible")

app.include_router(views.router, prefix="/api")
app.include_router(stats.router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    return {"message": "Bienvenido al backend de analítica de Vibedev"}


@app.get("/api/health", tags=["health"])
async def health():
    return {"status": "ok", "server": "alive"}


@app.get("/api/ping", tags=["health"])
async def ping():
    import time
    return {"pong": True, "time": time.time()}
