from careercoach.db.base import Base, TimestampMixin
from careercoach.db.engine import begin_write, create_db_engine, get_engine, get_sessionmaker

__all__ = [
    "Base",
    "TimestampMixin",
    "begin_write",
    "create_db_engine",
    "get_engine",
    "get_sessionmaker",
]
