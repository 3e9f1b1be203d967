from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(url: str) -> Engine:
    """Create an engine; SQLite connections are shared across scheduler threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    # Objects outlive their session: reminders are listed in one unit of
    # work and processed in another
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
