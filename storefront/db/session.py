# storefront/db/session.py
# SQLAlchemy engine and session factory.
# Works with Postgres and with SQLite (tests/local use).

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.core.config import settings

DATABASE_URL = settings.DATABASE_URL

# sqlite needs connect_args; Postgres gets an empty dict
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Request-scoped session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
