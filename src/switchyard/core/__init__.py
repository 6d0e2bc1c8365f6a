"""Core layer: the registry, pipeline composition and the dispatch engine.

The core depends on the domain layer only. Cross-cutting behaviors live
in :mod:`switchyard.behaviors` and plug in through the registry.
"""
