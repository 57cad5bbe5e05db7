"""Remove command for Shell Container."""

import sys

import click

from ..helpers import get_docker_service, get_manager_config, run_async
from ...core.lifecycle import ContainerLifecycleManager
from ...models.container import ContainerPresence


async def _remove(lifecycle: ContainerLifecycleManager, container_id: str) -> ContainerPresence:
    await lifecycle.remove_container(container_id)
    return await lifecycle.probe_container(container_id)


@click.command()
@click.argument('container_id')
@click.pass_context
def remove(ctx, container_id):
    """Remove a stopped container"""
    manager_config = get_manager_config(ctx)
    lifecycle = ContainerLifecycleManager(get_docker_service(), manager_config)

    presence = run_async(_remove(lifecycle, container_id))
    if presence is ContainerPresence.ABSENT:
        click.echo(f"Removed container: {container_id}")
    else:
        click.echo(f"Failed to remove container {container_id}", err=True)
        sys.exit(1)
