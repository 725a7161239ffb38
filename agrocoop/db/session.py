from sqlmodel import create_engine, Session, SQLModel
from agrocoop.core.config import settings

_engine = None


def get_engine():
    global _engine

    if _engine is not None:
        return _engine

    db_url = settings.DATABASE_URL or "sqlite:///./agrocoop.db"

    # SQLite fix for multithreading
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

    _engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)
    return _engine


engine = get_engine()


def init_db(bind=None) -> None:
    """Create every table registered on the SQLModel metadata."""
    # Importing the models registers them on SQLModel.metadata
    import agrocoop.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_db():
    with Session(engine) as session:
        yield session
