"""Engine factory and session helpers.

The engine is built lazily from Settings.database_url so that importing models
never requires configuration. SQLite connections get WAL mode, foreign keys, a
busy timeout, and explicit BEGIN handling so SAVEPOINT works.
"""

from functools import lru_cache
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from careercoach.config import get_settings

BEGIN_MODE_OPTION = "sqlite_begin"
_BEGIN_MODES = ("DEFERRED", "IMMEDIATE", "EXCLUSIVE")


def configure_sqlite(engine: Engine) -> None:
    """Install SQLite PRAGMAs and explicit BEGIN handling on an engine."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself; pysqlite's implicit handling breaks SAVEPOINT
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
        if mode not in _BEGIN_MODES:
            raise ValueError(f"Unsupported SQLite BEGIN mode: {mode!r}")
        conn.exec_driver_sql(f"BEGIN {mode}")


def begin_write(db: Session) -> None:
    """Open the session's next transaction as a write transaction.

    On SQLite this emits BEGIN IMMEDIATE, so the write lock is taken (waiting
    out busy_timeout) before anything is read. A deferred transaction that
    reads first cannot be upgraded once another connection has committed, and
    fails with "database is locked". Other backends ignore the option.

    Must be called with no transaction in progress, i.e. right after a
    commit or rollback.
    """
    db.connection(execution_options={BEGIN_MODE_OPTION: "IMMEDIATE"})


def create_db_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create a SQLAlchemy engine for the configured database.

    - Falls back to Settings.database_url when no URL is given
    - Creates the parent directory of a file-backed SQLite database
    """
    if database_url is None or echo is None:
        settings = get_settings()
        database_url = database_url or settings.database_url
        echo = settings.debug if echo is None else echo

    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        pool_pre_ping=not is_sqlite,
        echo=echo,
    )
    if is_sqlite:
        configure_sqlite(engine)
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Process-wide engine singleton."""
    return create_db_engine()


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker[Session]:
    """Session factory bound to the process-wide engine."""
    return sessionmaker(bind=get_engine(), expire_on_commit=False)
