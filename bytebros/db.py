from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def build_engine(database_url: str, pool_timeout: float = 10.0, **kwargs) -> Engine:
    """Create the engine that owns the connection pool.

    The engine is built once by the app factory and handed to whoever needs
    sessions; nothing imports a module-level pool.
    """
    if database_url.startswith("sqlite"):
        # For SQLite, enable check_same_thread=False for multithreading in FastAPI
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        # bounded wait for a free connection; a timeout surfaces as a store error
        kwargs.setdefault("pool_timeout", pool_timeout)
        kwargs.setdefault("pool_pre_ping", True)
    engine = create_engine(database_url, future=True, **kwargs)

    # Ensure SQLite enforces foreign keys
    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False so ids and columns stay readable after commit
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine, future=True)
