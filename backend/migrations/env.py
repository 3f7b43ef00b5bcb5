from __future__ import annotations
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv
import os, sys

# Allow importing lernen_authz models
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from lernen_authz.models.authz import Base  # noqa: E402

# Same .env / DATABASE_URL resolution as create_app()
load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
config.set_main_option('sqlalchemy.url', DATABASE_URL)

target_metadata = Base.metadata


def configure_kwargs(url: str):
    # SQLite cannot ALTER constraints in place; role/permission unique keys need batch mode
    return {
        'target_metadata': target_metadata,
        'render_as_batch': url.startswith('sqlite'),
        'compare_type': True,
    }


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, literal_binds=True, **configure_kwargs(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix='sqlalchemy.',
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, **configure_kwargs(str(connectable.url)))
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
