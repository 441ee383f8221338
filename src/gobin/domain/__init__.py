"""Domain layer: package specs, module coordinates, cache layout.

This layer depends only on stdlib, pydantic, and :mod:`gobin.errors`.
It must never import from services, infrastructure, commands, or config.
"""
