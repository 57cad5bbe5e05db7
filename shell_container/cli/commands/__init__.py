"""CLI commands for Shell Container."""
