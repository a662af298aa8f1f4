# backend/database.py
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from config import settings

Base = declarative_base()


# Normalize provider URLs (Azure/Heroku style postgres://, plain mysql://)
def normalize_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+pymysql://", 1)
    return url


def _enable_sqlite_fks(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    url = normalize_url(url)
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_fks)
    else:
        engine = create_engine(url, pool_pre_ping=True)
    return engine


class Database:
    """Storage handle opened at application startup and disposed at shutdown."""

    def __init__(self, url: Optional[str] = None):
        self.url = normalize_url(url or settings.DATABASE_URL)
        self.engine = create_db_engine(self.url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(self):
        init_db(self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine):
    # Import models so every table is registered on Base.metadata
    import models.users  # noqa: F401
    import models.category  # noqa: F401
    import models.brand  # noqa: F401
    import models.product  # noqa: F401
    import models.customer  # noqa: F401
    import models.order  # noqa: F401
    import models.settings  # noqa: F401
    import models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)
