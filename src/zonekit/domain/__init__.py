"""Domain layer — descriptors, sections, events, slot results and errors.

This layer depends only on stdlib and pydantic.
It must never import from plugins, infrastructure, commands, or config.
"""
