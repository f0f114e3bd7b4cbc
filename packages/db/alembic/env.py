# This project was developed with assistance from AI tools.
"""Alembic environment for the portal database.

Only ``db.Base`` metadata is migrated. CRM and ledger tables belong to
external systems and are never created or altered from here.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db import models  # noqa: F401  (registers tables on Base.metadata)
from db.database import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    """Prefer PORTAL_DATABASE_URL, downgraded to a sync driver for Alembic."""
    url = os.environ.get("PORTAL_DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    return url.replace("+asyncpg", "")


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
