"""Fixed names and closed value sets used by the configuration layer."""

from __future__ import annotations

from enum import StrEnum

# Import path of gobin's own main package (self-install detection).
SELF_IMPORT_PATH = "github.com/myitcv/gobin"

# Manifest that marks a Go module root.
MODULE_FILENAME = "go.mod"

# Module name declared by the go.mod of every ephemeral sandbox.
SANDBOX_MODULE = "gobin"

# Artifact cache directory inside the main module (main-module mode).
MAIN_MODULE_CACHE_DIRNAME = ".gobincache"

# Artifact cache directory inside the user cache dir (ephemeral mode).
USER_CACHE_DIRNAME = "gobin"


class ModMode(StrEnum):
    """Accepted values for ``-mod`` (forwarded to go as ``-mod=<value>``)."""

    READONLY = "readonly"
    VENDOR = "vendor"
