"""gobin: install and run Go main packages from a module-aware binary cache."""

__version__ = "0.1.0"
