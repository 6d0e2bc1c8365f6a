"""Domain layer. Message bases, Unit and value types.

This layer depends only on stdlib and pydantic.
It must never import from core, behaviors, infrastructure, or config.
"""
