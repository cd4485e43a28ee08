"""
Database Configuration Module

Connection URI resolution, in order:
- DATABASE_URL, when set
- PostgreSQL built from db_user / db_password / db_host / db_port / db_name
- a local SQLite file (development and tests)

The rate engine itself never touches this module directly. Its adapters
(pincode classifier, plan store) receive `SessionLocal` as a session factory.
"""

import os
from datetime import datetime
from urllib.parse import quote_plus
import uuid as uuid
from pytz import timezone
from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import Column, TIMESTAMP, Boolean, Integer, Uuid, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from logger import logging


# ============================================
# DATABASE CONNECTION CONFIGURATION
# ============================================

DBTYPE_POSTGRES = "postgresql"
DEFAULT_SQLITE_URI = "sqlite:///./rate_engine.db"


def build_database_uri() -> str:
    if os.environ.get("DATABASE_URL"):
        return os.environ["DATABASE_URL"]

    if os.environ.get("db_host"):
        return "%s://%s:%s@%s:%s/%s" % (
            DBTYPE_POSTGRES,
            os.environ.get("db_user"),
            quote_plus(os.environ.get("db_password", "")),
            os.environ.get("db_host"),
            os.environ.get("db_port", "5432"),
            os.environ.get("db_name"),
        )

    return DEFAULT_SQLITE_URI


CORE_SQLALCHEMY_DATABASE_URI = build_database_uri()

# ============================================
# CONNECTION POOL SETTINGS
# ============================================

# Rate quoting is read heavy: two pincode lookups and one plan fetch per request
POOL_CONFIG = {
    "pool_size": 20,
    "max_overflow": 10,
    "pool_timeout": 30,
    # handles stale connections
    "pool_pre_ping": True,
    "pool_recycle": 1800,
    "echo": False,
    "poolclass": QueuePool,
}

if CORE_SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    # sqlite connections are shared across the executor threads used for lookups
    db_engine = create_engine(
        CORE_SQLALCHEMY_DATABASE_URI,
        connect_args={"check_same_thread": False},
    )
else:
    db_engine = create_engine(
        CORE_SQLALCHEMY_DATABASE_URI,
        **POOL_CONFIG,
    )

# ============================================
# SESSION CONFIGURATION
# ============================================

SessionLocal = sessionmaker(
    autoflush=False,
    bind=db_engine,
    expire_on_commit=False,
)

# Timezone configuration
UTC = timezone("UTC")
IST = timezone("Asia/Kolkata")


def time_now():
    """Get current UTC time"""
    return datetime.now(UTC)


def time_now_ist():
    """Get current IST time"""
    return datetime.now(IST)


# ============================================
# CONNECTION POOL MONITORING
# ============================================


@event.listens_for(db_engine, "checkout")
def receive_checkout(dbapi_connection, connection_record, connection_proxy):
    logging.debug("Connection checked out from pool")


@event.listens_for(db_engine, "checkin")
def receive_checkin(dbapi_connection, connection_record):
    logging.debug("Connection returned to pool")


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models():
    """Create any missing tables. Safe to call on every startup."""
    import models  # noqa: F401  registers every table on DBBase.metadata

    DBBase.metadata.create_all(bind=db_engine)


# ============================================
# SESSION MANAGEMENT
# ============================================


def get_db():
    """
    Generator function for database session dependency injection.

    Usage in FastAPI:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...

    Commits on success unless the request context asked for a rollback,
    rolls back on error, and always closes the session.
    """
    from context_manager.context import context_set_db_session_rollback

    db: Session = SessionLocal()
    try:
        logging.debug("DB session created")
        yield db

        if context_set_db_session_rollback.get():
            logging.debug("Rolling back DB session")
            db.rollback()
        else:
            logging.debug("Committing DB session")
            db.commit()

    except Exception as e:
        logging.error(f"DB session error: {e}")
        db.rollback()
        raise
    finally:
        logging.debug("Closing DB session")
        try:
            db.close()
        except Exception as e:
            logging.error(f"Error closing DB session: {e}")


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides:
    - Auto-incrementing primary key (id)
    - UUID for external references
    - Created/updated timestamps
    - Soft delete flag
    """

    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)

    # UUID for external API references (don't expose internal IDs)
    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        default=time_now,
        onupdate=time_now,
        nullable=False,
    )

    is_deleted = Column(Boolean, default=False, index=True)

    @classmethod
    def get_by_id(cls, db: Session, id):
        """Get a live (not soft deleted) record by ID"""
        return db.query(cls).filter(cls.id == id, cls.is_deleted.is_(False)).first()

    def soft_delete(self):
        """Mark record as deleted (soft delete)"""
        self.is_deleted = True
        self.updated_at = time_now()
