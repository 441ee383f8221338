"""BaseService: shared foundation for gobin services.

Every service receives the frozen settings and a :class:`GoToolchain`
at construction time. Services never spawn processes or read the
environment themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gobin.config.settings import GobinSettings
    from gobin.infrastructure.go import GoToolchain


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ResolveService(BaseService):
            def resolve_all(self, specs):
                self._toolchain.fetch(...)
    """

    def __init__(self, settings: GobinSettings, toolchain: GoToolchain) -> None:
        self._settings = settings
        self._toolchain = toolchain

    @property
    def settings(self) -> GobinSettings:
        return self._settings
