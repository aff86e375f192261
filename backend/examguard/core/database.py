from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import OperationalError
import logging
import time
from .config import settings
from .exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    # SQLite (tests, local runs) needs one shared connection across threads
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=20,
        max_overflow=40,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_timeout=20,
        echo=False,
        connect_args={
            "connect_timeout": 10,
            "application_name": "examguard_api"
        }
    )


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_db_and_tables():
    # Model modules must be imported so their tables are registered on Base
    from .. import models  # noqa: F401

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Database tables creation error (may be normal if tables exist): {e}")


def retry_read(db: Session, operation, description: str = "read"):
    """
    Run an idempotent read, retrying transient connection failures with
    exponential backoff. Writes must not go through here.
    """
    retry_delay = settings.store_retry_delay
    attempts = max(1, settings.store_read_retries)

    for attempt in range(attempts):
        try:
            return operation()
        except OperationalError as e:
            db.rollback()
            if attempt == attempts - 1:
                logger.error(f"Store {description} failed after {attempts} attempts: {e}")
                raise StoreUnavailable()
            logger.warning(f"Store {description} failed (attempt {attempt + 1}/{attempts}), retrying: {e}")
            time.sleep(retry_delay)
            retry_delay *= 2
