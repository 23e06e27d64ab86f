import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_url(
    host: str,
    port: int,
    database: str,
    user: str,
    password: str,
    override: Optional[str] = None,
) -> URL:
    """Return the explicit URL override if given, else a psycopg URL from parts."""
    if override:
        return make_url(override)
    return URL.create(
        "postgresql+psycopg",
        username=user,
        password=password,
        host=host,
        port=port,
        database=database,
    )


def build_engine(url: URL, sslmode: str) -> Engine:
    """Create a pooled engine.

    For PostgreSQL, ``sslmode=require`` encrypts the connection without
    verifying the server certificate, so self-signed certificates are accepted.
    """
    if url.get_backend_name() != "postgresql":
        return create_engine(url)
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        pool_pre_ping=True,
        connect_args={
            "sslmode": sslmode,
            "connect_timeout": settings.db_connect_timeout,
        },
    )


primary_engine = build_engine(
    build_url(
        settings.db_host,
        settings.db_port,
        settings.db_name,
        settings.db_user,
        settings.db_password,
        settings.primary_database_url,
    ),
    settings.db_sslmode,
)
tracking_engine = build_engine(
    build_url(
        settings.supabase_host,
        settings.supabase_port,
        settings.supabase_db,
        settings.supabase_user,
        settings.supabase_password,
        settings.tracking_database_url,
    ),
    settings.supabase_sslmode,
)

PrimarySessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=primary_engine)
TrackingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=tracking_engine)


def get_primary_db():
    """Yield a session on the primary warehouse and always close it."""
    db = PrimarySessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_tracking_db():
    """Yield a session on the user/activity store and always close it.

    Endpoints are responsible for doing commit / rollback explicitly.
    """
    db = TrackingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection(engine: Engine) -> bool:
    """Run a trivial statement against ``engine``; log instead of raising."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Error connecting to database %s", engine.url.render_as_string())
        return False
    logger.info("Connected to database %s", engine.url.render_as_string())
    return True
