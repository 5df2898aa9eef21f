"""SQLAlchemy Core table definitions for the zonekit state database."""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table, Text

metadata = MetaData()

plugin_state = Table(
    "plugin_state",
    metadata,
    Column("key", Text, primary_key=True),  # plugin_<id>_state
    Column("value", Text, nullable=False),  # serialized blob
    Column("updated", Text, nullable=False),
)
