"""CLI Helper Functions for Shell Container.

This module provides reusable helper functions for CLI commands to reduce
code duplication and standardize behavior across all commands.

The helpers provide:
- Logging setup
- Configuration resolution from the group options
- Docker connection handling
- Running manager coroutines from synchronous commands
- Consistent table formatting for output
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, List, TypeVar

import click
from tabulate import tabulate

from shell_container.core.constants import CONFIG_FILE_NAME, LOG_FORMAT
from shell_container.models.config import ManagerConfig
from shell_container.services.docker_service import DockerService
from shell_container.services.exceptions import ConfigError, DockerServiceError
from shell_container.utils.config_manager import ConfigManager

T = TypeVar('T')


def configure_logging(verbose: bool = False) -> None:
    """Configure process-wide logging.

    Args:
        verbose: Log at DEBUG, which includes build progress events
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def get_manager_config(ctx: click.Context) -> ManagerConfig:
    """Resolve the configuration from the group options.

    Note:
        Exits with error message if the configuration is incomplete.
    """
    options = ctx.obj or {}
    config_file = options.get('config_file') or Path.cwd() / CONFIG_FILE_NAME
    config_manager = ConfigManager(config_file)
    try:
        return config_manager.get_config(
            image_name=options.get('image'),
            context_dir=options.get('context_dir'),
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def get_docker_service() -> DockerService:
    """Initialize Docker service with error handling.

    Note:
        Exits with error message if Docker is not available.
    """
    try:
        return DockerService()
    except DockerServiceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def run_async(coro: Awaitable[T]) -> T:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def print_table(headers: List[str], rows: List[List[Any]],
                tablefmt: str = "simple") -> None:
    """Print a table with project-wide defaults.

    Args:
        headers: Table headers
        rows: Table rows
        tablefmt: Table format (default: "simple")
    """
    table_str = tabulate(rows, headers=headers, tablefmt=tablefmt)
    click.echo(table_str)


def short_id(container_id: str) -> str:
    return container_id[:12]


__all__ = [
    'configure_logging',
    'get_manager_config',
    'get_docker_service',
    'run_async',
    'print_table',
    'short_id',
]
