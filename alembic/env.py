"""Alembic environment for the relay schema. Connects through `settings.postgres_dsn`."""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from topup.common.config import settings  # noqa: E402
from topup.common.db import Base  # noqa: E402
from topup.services.catalog import models as catalog_models  # noqa: E402,F401
from topup.services.payments import models as payment_models  # noqa: E402,F401
from topup.services.sms import models as sms_models  # noqa: E402,F401

target_metadata = Base.metadata


def get_database_url() -> str:
    # POSTGRES_DSN is required by settings.
    return settings.postgres_dsn


def run_migrations_offline() -> None:
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_database_url()
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
