"""Infrastructure layer: go command invocation, sandboxes, filesystem.

This layer depends on stdlib and third-party libs (structlog).
It must never import from services, commands, or output.
The service layer drives resolution and installation through it.
"""
