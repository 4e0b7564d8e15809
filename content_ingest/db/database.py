from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from content_ingest.config.settings import Settings
from content_ingest.db.models import Base


def make_engine(settings: Settings) -> Engine:
    url = settings.database_url
    connect_args = {}
    if url.startswith("sqlite"):
        # Branch threads share the engine; give writers time to wait on the file lock.
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, future=True, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """
    Create tables (idempotent) and verify connectivity.
    """
    if engine.url.get_backend_name() == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)

    # Create all tables
    Base.metadata.create_all(engine)

    # Connectivity check
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
