"""
Alembic Environment Configuration - Formalis

Ce fichier configure Alembic pour :
1. Charger l'URL de la base depuis formalis/core/config (qui lit le .env)
2. Importer tous les modèles SQLAlchemy pour l'autogenerate
3. Supporter les migrations online (base connectée) et offline (génération SQL)
"""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from formalis.core.config import settings

# L'import du package charge toutes les tables dans Base.metadata
from formalis.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


# === Helpers ===

def get_url() -> str:
    """URL de la base (DATABASE_URL du .env via pydantic-settings)."""
    return settings.DATABASE_URL


def include_object(object, name, type_, reflected, compare_to):
    """
    Filtre les objets comparés par l'autogenerate.

    Les fonctions et politiques RLS sont gérées à la main dans les
    migrations : seules les tables connues du metadata sont suivies.
    """
    if type_ == "table" and reflected and compare_to is None:
        return name == "alembic_version"
    return True


def run_migrations_offline() -> None:
    """
    Génère le SQL sans se connecter à la base.

    Usage:
        alembic upgrade head --sql > migration.sql
    """
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Applique les migrations sur la base.

    Usage:
        alembic upgrade head
    """
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


# === Point d'entrée ===

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
