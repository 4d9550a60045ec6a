"""Interview-to-manuscript generation backend."""

__version__ = "1.0.0"
