"""
Alembic environment configuration.
"""
import os
import sys
import asyncio
from logging.config import fileConfig
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
# Import all models to ensure they are registered with SQLAlchemy
from models import emergency, panic_event, user  # noqa: F401
from core.config import settings
from core.database import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url():
    """Get database URL from settings."""
    url = settings.database_url
    if not url:
        raise ValueError(
            "DATABASE_URL is not set. Please check your .env file or environment variables."
        )
    return url


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=get_url().startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Run migrations in 'online' mode using the async engine."""
    configuration = config.get_section(config.config_ini_section) or {}
    db_url = get_url()
    configuration["sqlalchemy.url"] = db_url

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    except Exception as e:
        raise Exception(
            f"Failed to connect to database. "
            f"Please verify:\n"
            f"1. The database server is running\n"
            f"2. Database exists: {db_url.split('/')[-1] if '/' in db_url else 'unknown'}\n"
            f"3. Credentials are correct\n"
            f"Error: {str(e)}"
        ) from e
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
