"""
Database Configuration Module

Connection settings come from the environment:
- DATABASE_URL, when set, is used as is (handy for sqlite in local runs)
- otherwise a PostgreSQL URI is composed from db_user, db_password,
  db_host, db_port and db_name
"""

import os
from datetime import datetime, timezone
from urllib.parse import quote_plus
import uuid as uuid
from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import Column, TIMESTAMP, Integer, Uuid, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from logger import logger


# ============================================
# DATABASE CONNECTION CONFIGURATION
# ============================================

DBTYPE_POSTGRES = "postgresql"


def build_database_uri() -> str:
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    return "%s://%s:%s@%s:%s/%s" % (
        DBTYPE_POSTGRES,
        os.environ.get("db_user"),
        quote_plus(os.environ.get("db_password", "")),
        os.environ.get("db_host"),
        os.environ.get("db_port"),
        os.environ.get("db_name"),
    )


CORE_SQLALCHEMY_DATABASE_URI = build_database_uri()

# pool settings only apply to a real server, sqlite uses its own pool
if CORE_SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    POOL_CONFIG = {
        "connect_args": {"check_same_thread": False},
        "echo": False,
    }
else:
    POOL_CONFIG = {
        "pool_size": 10,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "echo": False,
    }

db_engine = create_engine(CORE_SQLALCHEMY_DATABASE_URI, **POOL_CONFIG)

SessionLocal = sessionmaker(
    autoflush=False,
    bind=db_engine,
    expire_on_commit=False,
)


def time_now():
    """Get current UTC time"""
    return datetime.now(timezone.utc)


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models(engine=None):
    """Create every table registered on DBBase."""
    import models  # noqa: F401  registers the tables

    DBBase.metadata.create_all(bind=engine or db_engine)
    logger.info(msg="Database tables ready")


# ============================================
# SESSION MANAGEMENT
# ============================================


def get_db():
    """
    Generator function for database session dependency injection.

    Commits when the request finishes, unless the request context asked for a
    rollback. Any exception rolls the session back and is re-raised.
    """
    from context_manager.context import context_set_db_session_rollback

    db: Session = SessionLocal()
    try:
        yield db

        if context_set_db_session_rollback.get():
            logger.debug(msg="Rolling back DB session")
            db.rollback()
        else:
            db.commit()

    except Exception as e:
        logger.error(msg=f"DB session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides an auto-incrementing primary key, a UUID for external references
    and created/updated timestamps.
    """

    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)

    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        default=time_now,
        onupdate=time_now,
        nullable=False,
    )

    @classmethod
    def get_by_id(cls, id):
        """Get record by ID"""
        from context_manager.context import get_db_session

        db: Session = get_db_session()
        return db.query(cls).filter(cls.id == id).first()

    def to_dict(self):
        return {
            "id": self.id,
            "uuid": str(self.uuid),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
