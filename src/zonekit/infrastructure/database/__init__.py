"""SQLite database engine and schema for plugin state via SQLAlchemy Core."""

from zonekit.infrastructure.database.engine import create_db_engine, init_database
from zonekit.infrastructure.database.schema import metadata, plugin_state

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "plugin_state",
]
