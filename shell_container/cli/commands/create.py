"""Create command for Shell Container."""

import sys

import click

from ..helpers import get_docker_service, get_manager_config, run_async
from ...core.lifecycle import ContainerLifecycleManager


@click.command()
@click.pass_context
def create(ctx):
    """Start a new self-removing shell container and print its id"""
    manager_config = get_manager_config(ctx)
    lifecycle = ContainerLifecycleManager(get_docker_service(), manager_config)

    container_id = run_async(lifecycle.create_session_container())
    if container_id is None:
        click.echo("Error: Could not create session container", err=True)
        sys.exit(1)
    click.echo(container_id)
