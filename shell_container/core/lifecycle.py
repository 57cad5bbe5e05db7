"""Session container lifecycle management."""

import logging
from typing import Optional

from ..models.config import ManagerConfig
from ..models.container import ContainerPresence
from ..services.docker_service import DockerService
from ..services.exceptions import ContainerNotFoundError, ServiceError

logger = logging.getLogger(__name__)


class ContainerLifecycleManager:
    """Creates, inspects and removes interactive session containers."""

    def __init__(self, docker_service: DockerService, config: ManagerConfig):
        self.docker_service = docker_service
        self.config = config

    async def create_session_container(self) -> Optional[str]:
        """Create and start a self-removing shell container.

        Returns:
            The container id, or None if it could not be created and started
        """
        try:
            container_id = await self.docker_service.create_container(
                image=self.config.image_tag,
                command=[self.config.shell],
                tty=True,
                stdin_open=True,
                auto_remove=True,
            )
        except ServiceError as e:
            logger.error(f"Error creating Docker container: {e}")
            return None

        try:
            await self.docker_service.start_container(container_id)
        except ServiceError as e:
            logger.error(f"Error starting Docker container {container_id}: {e}")
            await self._discard(container_id)
            return None

        logger.info(f"Started container {container_id}")
        return container_id

    async def _discard(self, container_id: str) -> None:
        """Remove a container that was created but never started."""
        try:
            await self.docker_service.remove_container(container_id, force=True)
        except ServiceError as e:
            logger.error(f"Failed to discard unstarted container {container_id}: {e}")

    async def resolve_container_name(self, container_id: str) -> str:
        """Get a container's name without the daemon's leading '/'.

        Raises:
            ContainerNotFoundError: If the daemon doesn't know the container
            DockerServiceError: If inspection fails
        """
        record = await self.docker_service.inspect_container(container_id)
        return record.name

    async def probe_container(self, container_id: str) -> ContainerPresence:
        try:
            await self.docker_service.inspect_container(container_id)
            return ContainerPresence.PRESENT
        except ContainerNotFoundError:
            return ContainerPresence.ABSENT
        except ServiceError as e:
            logger.warning(f"Could not determine whether container {container_id} exists: {e}")
            return ContainerPresence.UNKNOWN

    async def container_exists(self, container_id: str) -> bool:
        """Check if a container exists.

        An inspection error other than not-found is reported as absent.
        """
        return await self.probe_container(container_id) is ContainerPresence.PRESENT

    async def container_is_running(self, container_id: str) -> bool:
        """Check if a container is running, assuming not on error."""
        try:
            record = await self.docker_service.inspect_container(container_id)
            return record.running
        except ServiceError as e:
            logger.error(f"Error checking container {container_id} status: {e}")
            return False

    async def remove_container(self, container_id: str) -> None:
        """Remove a stopped container if it still exists.

        Never raises. Removing a container that is already gone only logs.
        """
        try:
            record = await self.docker_service.inspect_container(container_id)
        except ContainerNotFoundError:
            logger.info(f"Container {container_id} no longer exists.")
            return
        except ServiceError as e:
            logger.error(f"Error removing container {container_id}: {e}")
            return

        try:
            await self.docker_service.remove_container(container_id)
        except ContainerNotFoundError:
            logger.info(f"Container {record.name} no longer exists.")
            return
        except ServiceError as e:
            logger.error(f"Error removing container {record.name}: {e}")
            return
        logger.info(f"Container {record.name} successfully removed.")
