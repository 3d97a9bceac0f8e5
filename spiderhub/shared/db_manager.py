from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base

from .settings import DEFAULT_DATABASE_URL

# Session factory, bound lazily by init_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

# Scoped session for thread safety: request threads and listener threads
# each get their own session
db_session = scoped_session(SessionLocal)

# Base class for models
Base = declarative_base()
Base.query = db_session.query_property()

_engine: Optional[Engine] = None


def init_engine(database_url: str = DEFAULT_DATABASE_URL) -> Engine:
    """Create the engine and bind the session factory to it"""
    global _engine
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # sqlite connections are shared with listener threads
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # pool_recycle to prevent MySQL connection timeout
        kwargs["pool_recycle"] = 3600
    _engine = create_engine(database_url, **kwargs)
    SessionLocal.configure(bind=_engine)
    db_session.remove()
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("database engine is not initialized, call init_engine() first")
    return _engine


def init_db():
    """Initialize database tables"""
    import spiderhub.task.infrastructure.database.models  # noqa: F401
    Base.metadata.create_all(bind=get_engine())
