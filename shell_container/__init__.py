"""Shell Container - Keep a session image fresh and manage ephemeral shell containers."""

__version__ = "0.1.0"

# Export main CLI for convenience
from .cli.main import cli

__all__ = ['cli']
