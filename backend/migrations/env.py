import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

# Пакет projecthub лежит на уровень выше каталога migrations
sys.path.insert(0, str(Path(__file__).parent.parent))

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

import projecthub.models  # noqa: F401, E402 - register every table on Base.metadata
from projecthub.core.settings import settings  # noqa: E402
from projecthub.db import Base, normalize_db_url  # noqa: E402

target_metadata = Base.metadata


def _database_url() -> str:
    """
    Resolution order: ``alembic -x db_url=...``, ``sqlalchemy.url`` in
    alembic.ini, then ``DB_URL`` from the application settings.
    """
    url = context.get_x_argument(as_dictionary=True).get("db_url") or config.get_main_option("sqlalchemy.url")
    url, _ = normalize_db_url(url or settings.db_url)
    return url


def _configure_options(url: str) -> dict:
    # SQLite cannot ALTER most constraints in place; batch mode recreates the table
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    url = _database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    connectable = engine_from_config({"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
