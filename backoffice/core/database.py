"""
Back-Office Database Configuration
SQLAlchemy setup for the store of record
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql.expression import FunctionElement
from sqlalchemy.types import DateTime

from .config import Settings
from .exceptions import ConstraintViolation, PersistenceFailure
from .logging import get_logger

logger = get_logger("database")

# Create base class for models
Base = declarative_base()

# Metadata with naming convention for constraints
Base.metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
})

# PostgreSQL SQLSTATEs for lock_not_available, deadlock_detected, serialization_failure
LOCK_FAILURE_CODES = {"55P03", "40P01", "40001"}


class insert_timestamp(FunctionElement):
    """
    Wall-clock time at which the INSERT runs

    PostgreSQL's CURRENT_TIMESTAMP is fixed at transaction start, before the
    product row lock is granted; clock_timestamp() is read under the lock.
    """
    type = DateTime(timezone=True)
    inherit_cache = True


@compiles(insert_timestamp)
def _insert_timestamp_default(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(insert_timestamp, "postgresql")
def _insert_timestamp_postgresql(element, compiler, **kw):
    return "clock_timestamp()"


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database

    PostgreSQL gets a pooled engine. SQLite (development and tests) gets a
    busy timeout equal to the lock timeout and immediate write transactions.
    """
    url = make_url(settings.DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.LOCK_TIMEOUT_MS / 1000,
            },
            echo=settings.DEBUG,
        )
        _install_sqlite_locking(engine)
        return engine

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Validate connections before use
        echo=settings.DEBUG,  # Log SQL queries in debug mode
    )


def _install_sqlite_locking(engine: Engine) -> None:
    """
    SQLite ignores FOR UPDATE, so every transaction takes the write lock up front.

    The driver's own transaction handling is switched off and SQLAlchemy's
    begin event emits BEGIN IMMEDIATE instead.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def describe_failure(exc: SQLAlchemyError) -> str:
    """Human-readable message for a store-of-record failure"""
    code = getattr(getattr(exc, "orig", None), "pgcode", None)
    if code == "40P01":
        return "Deadlock detected while updating stock; the request can be retried"
    if code in LOCK_FAILURE_CODES:
        return "Timed out waiting for the product lock; the request can be retried"
    if "database is locked" in str(exc):
        return "Timed out waiting for the database lock; the request can be retried"
    return f"Database error ({exc.__class__.__name__}); the request can be retried"


def translate_failure(exc: SQLAlchemyError) -> PersistenceFailure:
    """
    Map a driver error to the failure raised to callers

    Key and CHECK violations fail the same way on every attempt and are not
    retryable; I/O, lock and deadlock errors are.
    """
    if isinstance(exc, IntegrityError):
        return ConstraintViolation(
            f"Write rejected by a database constraint: {getattr(exc, 'orig', exc)}"
        )
    return PersistenceFailure(describe_failure(exc))


class Database:
    """
    Handle to the store of record

    Owns the engine and session factory. Constructed once by the
    application (or a test) and passed to every service that needs it.
    """

    def __init__(self, settings: Settings, engine: Optional[Engine] = None):
        self.settings = settings
        self.engine = engine if engine is not None else create_db_engine(settings)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session for read paths; closed on exit"""
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            logger.error(f"Database session error: {e}")
            db.rollback()
            raise translate_failure(e) from e
        finally:
            db.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """
        Atomic unit of work

        Commits when the block exits normally. Any exception rolls back every
        write made in the block; SQLAlchemy errors are re-raised as
        ``PersistenceFailure`` (``ConstraintViolation`` for key and CHECK
        violations), everything else propagates unchanged.
        """
        db = self.SessionLocal()
        try:
            with db.begin():
                self._apply_lock_timeout(db)
                yield db
        except SQLAlchemyError as e:
            logger.error(f"Unit of work rolled back: {e}")
            raise translate_failure(e) from e
        finally:
            db.close()

    def _apply_lock_timeout(self, db: Session) -> None:
        if self.engine.dialect.name == "postgresql":
            db.execute(text(f"SET LOCAL lock_timeout = {int(self.settings.LOCK_TIMEOUT_MS)}"))

    def create_all(self) -> None:
        """
        Initialize database tables

        Imports the models package so every table is registered with Base.
        """
        from backoffice import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created successfully")

    def check_connection(self) -> bool:
        """
        Check if database connection is working

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
