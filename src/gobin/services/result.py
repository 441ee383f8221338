"""What a gobin run hands back to the CLI.

``GobinService.execute`` reports every user-fixable outcome (bad flags,
unresolvable packages, build failures) as a :class:`ServiceResult` rather
than an exception. Only :class:`~gobin.errors.InvariantError` escapes, since
it signals a bug rather than bad input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gobin.errors import GobinError


class ServiceError(BaseModel):
    """Error code, message, and machine-readable context for ``--json``."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one run in a given mode.

    ``lines`` is everything a successful run prints to stdout (cache paths,
    ``pkg version`` pairs, ``Installed ...`` notices); ``data`` is the same
    information structured for ``--json``. ``meta`` only carries the span
    tree under ``-debug``.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    lines: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @property
    def error_message(self) -> str:
        if self.error is None:
            return "unknown error"
        return self.error.message

    @classmethod
    def failure(cls, op: str, exc: GobinError, **detail: Any) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=str(exc), detail=detail),
        )
