from logging.config import fileConfig

from sqlalchemy import create_engine
from alembic import context

from salonbook.config import settings
from salonbook.database import enable_sqlite_fk
from salonbook.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
target_metadata = Base.metadata

DATABASE_URL = settings.resolved_database_url
IS_SQLITE = DATABASE_URL.startswith("sqlite")


def run_migrations_offline():
    context.configure(url=DATABASE_URL, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False} if IS_SQLITE else {},
    )
    if IS_SQLITE:
        from sqlalchemy import event
        event.listen(connectable, "connect", enable_sqlite_fk)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=IS_SQLITE,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
