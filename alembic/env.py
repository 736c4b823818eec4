"""
Alembic migration environment for the Quote Threading service.

The database URL comes from DATABASE_URL, falling back to the config class
selected by FLASK_ENV, so migrations target the same database as the app.
SQLite URLs run in batch mode since SQLite cannot ALTER most constraints.
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool, create_engine
from alembic import context

# Project root on the path so config and database import
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_config
from database.connection import Base, normalize_database_url
from database import models  # noqa: F401 - registers users, companies, quotes, quote_services, email_threads

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url():
    """DATABASE_URL if set, otherwise the active config class's database."""
    url = normalize_database_url(os.environ.get('DATABASE_URL') or get_config().DATABASE_URL)
    if not url:
        raise RuntimeError("No database configured; set DATABASE_URL")
    return url


def configure_context(url, **kwargs):
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith('sqlite'),
        **kwargs
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    url = get_url()
    configure_context(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single unpooled connection."""
    url = get_url()
    connectable = create_engine(url, poolclass=pool.NullPool)

    try:
        with connectable.connect() as connection:
            configure_context(url, connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
