import logging

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings


logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in url


def build_engine(url: str, echo: bool = False) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    if _is_memory_sqlite(url):
        # A single shared connection, otherwise every session gets an empty database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 60},
        poolclass=NullPool,  # avoid multiple pooled connections holding write locks
    )
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
            conn.exec_driver_sql("PRAGMA busy_timeout=60000;")
    except OperationalError:
        # Database momentarily locked (e.g. reloader startup); pragmas are an optimisation
        logger.warning("Could not apply SQLite pragmas to %s", url)
    return engine


engine = build_engine(settings.database_url, echo=settings.sql_echo)


def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    from .models import user, expense  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)
    logger.info("Database initialized")
