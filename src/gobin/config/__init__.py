"""Configuration layer: flags, Go environment, directory discovery."""
