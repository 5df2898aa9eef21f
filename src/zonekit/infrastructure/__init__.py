"""Infrastructure layer — durable key/value media for plugin state.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from domain, plugins, commands, or config.
The state store bridges between plugin ids and storage keys.
"""
