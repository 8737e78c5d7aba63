from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from app.core.config import settings

logger = logging.getLogger("app")

if not settings.DATABASE_URL:
    logger.error("DATABASE_URL is not set or empty!")
    raise ValueError("DATABASE_URL environment variable is required")

def _engine_options(database_url: str) -> dict:
    if not database_url.startswith("sqlite"):
        return {
            "pool_pre_ping": True,  # Check connection before using from pool
            "pool_recycle": 3600,   # Recycle connections after 1 hour
        }
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live as long as their single connection
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options

try:
    engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
    logger.info("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Create session factory for database interactions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all SQLAlchemy models
Base = declarative_base()

# Database session dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
