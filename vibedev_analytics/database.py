# Configuración de base de datos usando SQLAlchemy.
#
# ESTRATEGIA DE BASE DE DATOS:
# - DESARROLLO LOCAL: Usa SQLite local (vibedev.db) por defecto
# - PRODUCCIÓN: Usa PostgreSQL (solo si DATABASE_URL está configurada)
#
# Para los tests se puede usar DATABASE_URL=sqlite:// (en memoria).

import os
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Cargar variables de entorno desde .env (solo en desarrollo local)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
load_dotenv(dotenv_path=env_path)

env_database_url = os.getenv("DATABASE_URL", "").strip()

IS_POSTGRES = bool(env_database_url) and env_database_url.startswith("postgres")

if env_database_url:
    DATABASE_URL = env_database_url
    print(f"[INFO] Usando base de datos configurada ({DATABASE_URL.split(':', 1)[0]})")
else:
    DATABASE_URL = "sqlite:///./vibedev.db"
    print("[INFO] Usando SQLite local para desarrollo")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine_kwargs = {"connect_args": connect_args}
# SQLite en memoria: una sola conexión compartida para que todas las sesiones vean las mismas tablas
if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
    engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def fix_sequences():
    """
    Arregla las secuencias de PostgreSQL para que usen max(id)+1.
    Esto soluciona errores de "duplicate key value violates unique constraint"
    cuando la secuencia está desincronizada de los datos existentes.

    Solo aplica a PostgreSQL - SQLite no tiene este problema.
    """
    if not IS_POSTGRES:
        return

    print("[INFO] Verificando y arreglando secuencias de PostgreSQL...")

    tables_to_fix = ["view_events", "visitor_sessions"]

    try:
        with engine.connect() as conn:
            for table in tables_to_fix:
                try:
                    result = conn.execute(text(f"""
                        SELECT EXISTS (
                            SELECT FROM information_schema.tables
                            WHERE table_name = '{table}'
                        )
                    """))
                    exists = result.scalar()

                    if not exists:
                        continue

                    conn.execute(text(f"""
                        SELECT setval(
                            pg_get_serial_sequence('{table}', 'id'),
                            COALESCE((SELECT MAX(id) FROM {table}), 0) + 1,
                            false
                        )
                    """))
                    conn.commit()
                    print(f"[INFO] Secuencia de '{table}' sincronizada correctamente")

                except Exception as e:
                    print(f"[WARN] No se pudo arreglar secuencia de '{table}': {e}")

    except Exception as e:
        print(f"[WARN] Error al arreglar secuencias: {e}")


def get_db():
    """
    Dependencia para inyectar la sesión de DB en los endpoints de FastAPI.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
