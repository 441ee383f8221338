"""Click plumbing for the gobin command (base class and runtime context)."""
