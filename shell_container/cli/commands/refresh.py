"""Refresh command for Shell Container."""

import sys

import click

from ..helpers import get_docker_service, get_manager_config, run_async
from ...core.image_cache import ImageCacheManager


async def _refresh(manager: ImageCacheManager, follow: bool):
    handle = await manager.ensure_fresh()
    if handle is None:
        return None

    if follow:
        async for event in handle.progress():
            if 'stream' in event:
                click.echo(event['stream'], nl=False)
    # The build is cancelled if the event loop closes under it
    return await handle.wait()


@click.command()
@click.option('--follow', '-f', is_flag=True, help='Print build output as it arrives')
@click.pass_context
def refresh(ctx, follow):
    """Rebuild the session image if its build context changed"""
    manager_config = get_manager_config(ctx)
    docker_service = get_docker_service()
    manager = ImageCacheManager(docker_service, manager_config)

    result = run_async(_refresh(manager, follow))
    if result is None:
        click.echo(f"No build started for {manager_config.image_tag}")
        return

    if not result.succeeded:
        click.echo(f"Build failed: {result.error}", err=True)
        sys.exit(1)
    click.echo(f"Container image built: {result.tag}")
