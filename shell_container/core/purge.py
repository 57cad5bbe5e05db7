"""Removal of containers not claimed by any session."""

import logging
from typing import Container

from ..models.container import ContainerPresence
from ..models.purge import PurgeAction, PurgeOutcome, PurgeReport
from ..services.docker_service import DockerService
from ..services.exceptions import (
    ContainerNotFoundError,
    RemovalInProgressError,
    ServiceError,
)
from .lifecycle import ContainerLifecycleManager

logger = logging.getLogger(__name__)


class PurgeEngine:
    """Reconciles the daemon's containers against a session registry."""

    def __init__(self, docker_service: DockerService, lifecycle: ContainerLifecycleManager):
        self.docker_service = docker_service
        self.lifecycle = lifecycle

    async def purge_untracked(self, registry: Container[str]) -> PurgeReport:
        """Stop and remove every container whose id is not in ``registry``.

        Args:
            registry: Container ids currently in use; only ``in`` is used

        Returns:
            Per-container outcomes. ``aborted`` is set if listing failed.
        """
        report = PurgeReport()
        try:
            container_ids = await self.docker_service.list_containers(all=True)
        except ServiceError as e:
            logger.error(f"Error removing containers not in session map: {e}")
            report.aborted = True
            report.error = str(e)
            return report

        report.considered = len(container_ids)
        for container_id in container_ids:
            if container_id in registry:
                report.outcomes.append(PurgeOutcome(container_id, PurgeAction.KEPT))
                continue
            report.outcomes.append(await self._purge_one(container_id))

        logger.info(
            f"Containers purged: considered {report.considered}, "
            f"removed {len(report.removed)}, failed {len(report.failed)}"
        )
        return report

    async def _purge_one(self, container_id: str) -> PurgeOutcome:
        presence = await self.lifecycle.probe_container(container_id)
        if presence is ContainerPresence.ABSENT:
            logger.info(f"Container {container_id} does not exist.")
            return PurgeOutcome(container_id, PurgeAction.ALREADY_GONE)
        if presence is ContainerPresence.UNKNOWN:
            return PurgeOutcome(
                container_id, PurgeAction.FAILED, "could not inspect container"
            )

        stopped = False
        try:
            if await self.lifecycle.container_is_running(container_id):
                logger.info(f"Stopping container {container_id}")
                await self.docker_service.stop_container(
                    container_id, timeout=self.lifecycle.config.stop_timeout
                )
                logger.info(f"Container {container_id} stopped")
                stopped = True

            logger.info(f"Removing container {container_id}")
            await self.docker_service.remove_container(container_id)
        except (ContainerNotFoundError, RemovalInProgressError):
            # Auto-remove containers disappear on their own once stopped
            logger.info(f"Container {container_id} is already gone")
            if stopped:
                return PurgeOutcome(container_id, PurgeAction.STOPPED_AND_REMOVED)
            return PurgeOutcome(container_id, PurgeAction.ALREADY_GONE)
        except ServiceError as e:
            logger.error(f"Failed to purge container {container_id}: {e}")
            return PurgeOutcome(container_id, PurgeAction.FAILED, str(e))

        action = PurgeAction.STOPPED_AND_REMOVED if stopped else PurgeAction.REMOVED
        return PurgeOutcome(container_id, action)
