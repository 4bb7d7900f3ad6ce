"""Local sources of desired variable state."""

from .env_file import EnvFileSource

__all__ = ["EnvFileSource"]
