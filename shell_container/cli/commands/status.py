"""Status command for Shell Container."""

import logging

import click

from ..helpers import get_docker_service, print_table, run_async, short_id
from ...services.docker_service import DockerService
from ...services.exceptions import ContainerNotFoundError, ServiceError

logger = logging.getLogger(__name__)


async def _collect(docker_service: DockerService, container_ids):
    rows = []
    for container_id in container_ids:
        # One inspect per id so name and state come from the same snapshot
        try:
            record = await docker_service.inspect_container(container_id)
        except ContainerNotFoundError:
            rows.append([short_id(container_id), "", "no", "stopped"])
            continue
        except ServiceError as e:
            logger.warning(f"Could not inspect container {container_id}: {e}")
            rows.append([short_id(container_id), "", "unknown", click.style("unknown", fg='yellow')])
            continue
        rows.append([
            short_id(container_id),
            record.name,
            "yes",
            click.style("running", fg='green') if record.running else "stopped"
        ])
    return rows


@click.command()
@click.argument('container_ids', nargs=-1, required=True)
def status(container_ids):
    """Show name and state of one or more containers"""
    rows = run_async(_collect(get_docker_service(), container_ids))
    print_table(["ID", "NAME", "EXISTS", "STATE"], rows)
