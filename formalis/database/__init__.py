from formalis.database.session import SessionLocal, engine
from formalis.database.session_rls import (
    get_db,
    get_db_no_rls,
    configure_tenant_context,
)

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_no_rls",
    "configure_tenant_context",
]
