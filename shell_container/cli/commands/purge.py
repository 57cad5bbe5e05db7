"""Purge command for Shell Container."""

import sys

import click

from ..helpers import get_docker_service, get_manager_config, print_table, run_async, short_id
from ...core.lifecycle import ContainerLifecycleManager
from ...core.purge import PurgeEngine
from ...models.purge import PurgeAction


class KeepSet:
    """Container ids to keep, matched by prefix so short ids work."""

    def __init__(self, prefixes):
        self.prefixes = tuple(p for p in prefixes if p)

    def __contains__(self, container_id):
        return container_id.startswith(self.prefixes) if self.prefixes else False


ACTION_COLORS = {
    PurgeAction.KEPT: 'green',
    PurgeAction.FAILED: 'red',
}


@click.command()
@click.option('--keep', '-k', multiple=True, help='Id of a container that is in use (repeatable)')
@click.pass_context
def purge(ctx, keep):
    """Stop and remove every container not listed with --keep"""
    manager_config = get_manager_config(ctx)
    docker_service = get_docker_service()
    lifecycle = ContainerLifecycleManager(docker_service, manager_config)
    engine = PurgeEngine(docker_service, lifecycle)

    report = run_async(engine.purge_untracked(KeepSet(keep)))
    if report.aborted:
        click.echo(f"Error: Purge aborted: {report.error}", err=True)
        sys.exit(1)

    rows = [
        [
            short_id(outcome.container_id),
            click.style(outcome.action.value, fg=ACTION_COLORS.get(outcome.action, 'white')),
            outcome.error or ""
        ]
        for outcome in report.outcomes
    ]
    if rows:
        print_table(["ID", "RESULT", "ERROR"], rows)
    click.echo(
        f"Considered {report.considered} container(s), "
        f"removed {len(report.removed)}, failed {len(report.failed)}"
    )
    if report.failed:
        sys.exit(1)
