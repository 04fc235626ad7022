"""Alembic migration runner using the application's engine.

Uses careercoach.db.engine.get_engine, which reads CAREERCOACH_DATABASE_URL and
applies the SQLite connection settings.
"""

from logging.config import fileConfig

from alembic import context

# Import all model modules to register them with Base.metadata
import careercoach.insights.models  # noqa: F401
import careercoach.users.models  # noqa: F401
from careercoach.db.base import Base
from careercoach.db.engine import get_engine

# Alembic Config object
config = context.config

# Set up Python logging from the ini file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate support
target_metadata = Base.metadata


def run_migrations_online() -> None:
    """Run migrations using the application's engine."""
    with get_engine().connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


run_migrations_online()
