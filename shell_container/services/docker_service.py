"""Docker service for abstracting Docker operations."""

import asyncio
import logging
from typing import IO, Any, Callable, List, Optional

import docker
import docker.errors

from ..models.container import ContainerRecord
from ..models.image import ImageRecord
from .exceptions import (
    BuildFailedError,
    ContainerNotFoundError,
    DockerServiceError,
    ImageNotFoundError,
    RemovalInProgressError,
    ResourceConflictError,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[dict], None]


def _conflict_error(e: docker.errors.APIError, message: str) -> DockerServiceError:
    """Translate a 409 from the daemon into the matching conflict error."""
    explanation = str(getattr(e, 'explanation', '') or e)
    if "already in progress" in explanation:
        return RemovalInProgressError(f"{message}: {explanation}")
    return ResourceConflictError(f"{message}: {explanation}")


class DockerService:
    """Asynchronous facade over a single Docker daemon connection.

    docker-py is blocking, so every call is dispatched to a worker thread
    with ``asyncio.to_thread``. One instance is created at startup and shared
    by every manager; the daemon serializes conflicting operations itself.
    """

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize Docker service and test connection."""
        try:
            self.client = client or docker.from_env()
            self.client.ping()
        except docker.errors.DockerException as e:
            if "connection refused" in str(e).lower() or "cannot connect" in str(e).lower():
                raise DockerServiceError(
                    "Docker daemon is not running. Please start Docker Desktop or the Docker service."
                ) from e
            else:
                raise DockerServiceError(f"Failed to connect to Docker: {e}") from e

    # Images

    async def inspect_image(self, tag: str) -> ImageRecord:
        """Inspect an image by tag or id.

        Raises:
            ImageNotFoundError: If no image carries the tag
            DockerServiceError: If inspection fails
        """
        try:
            image = await asyncio.to_thread(self.client.images.get, tag)
            return ImageRecord.from_attrs(image.attrs)
        except docker.errors.ImageNotFound as e:
            raise ImageNotFoundError(f"Image '{tag}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to inspect image: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error inspecting image: {e}") from e

    async def list_images(self) -> List[ImageRecord]:
        """List every image known to the daemon, dangling layers included.

        Raises:
            DockerServiceError: If listing fails
        """
        try:
            images = await asyncio.to_thread(self.client.api.images)
            return [ImageRecord.from_attrs(image) for image in images]
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to list images: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error listing images: {e}") from e

    async def remove_image(self, image_id: str, force: bool = True) -> None:
        """Remove a Docker image.

        Args:
            image_id: Image id or tag
            force: Force removal

        Raises:
            ImageNotFoundError: If image not found
            ResourceConflictError: If the image is in use
            DockerServiceError: If removal fails
        """
        try:
            await asyncio.to_thread(self.client.images.remove, image_id, force=force)
        except docker.errors.ImageNotFound as e:
            raise ImageNotFoundError(f"Image '{image_id}' not found") from e
        except docker.errors.APIError as e:
            if e.status_code == 409:
                raise _conflict_error(e, f"Image '{image_id}' is in use") from e
            raise DockerServiceError(f"Failed to remove image: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error removing image: {e}") from e

    async def build_image(
        self,
        fileobj: IO[bytes],
        tag: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[dict]:
        """Build an image from an in-memory tar build context.

        Args:
            fileobj: Tar archive holding the build context
            tag: Tag for the image
            on_progress: Called on the event loop thread for every build event

        Returns:
            Every decoded build event, in order

        Raises:
            BuildFailedError: If the daemon reports a build error
            DockerServiceError: If the build cannot be started
        """
        loop = asyncio.get_running_loop()

        def _stream() -> List[dict]:
            output = []
            for event in self.client.api.build(
                fileobj=fileobj,
                custom_context=True,
                tag=tag,
                rm=True,
                decode=True,
            ):
                output.append(event)
                if on_progress is not None:
                    loop.call_soon_threadsafe(on_progress, event)
                if 'error' in event:
                    raise BuildFailedError(
                        f"Failed to build image: {event['error'].strip()}", output
                    )
            return output

        try:
            return await asyncio.to_thread(_stream)
        except BuildFailedError:
            raise
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to build image: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error building image: {e}") from e

    # Containers

    async def create_container(
        self,
        image: str,
        command: Optional[Any] = None,
        tty: bool = False,
        stdin_open: bool = False,
        auto_remove: bool = False,
        **kwargs,
    ) -> str:
        """Create a Docker container and return its id.

        Args:
            image: Image name
            command: Command to run
            tty: Allocate a pseudo-terminal
            stdin_open: Keep stdin open and attached
            auto_remove: Let the daemon remove the container when it exits
            **kwargs: Additional Docker create parameters

        Raises:
            ImageNotFoundError: If image not found
            DockerServiceError: If creation fails
        """
        def _create():
            host_config = self.client.api.create_host_config(auto_remove=auto_remove)
            config = self.client.api.create_container_config(
                image,
                command,
                stdin_open=stdin_open,
                tty=tty,
                host_config=host_config,
                **kwargs,
            )
            # stdin stays open across attaches
            config['StdinOnce'] = False
            return self.client.api.create_container_from_config(config)['Id']

        try:
            return await asyncio.to_thread(_create)
        except docker.errors.ImageNotFound as e:
            raise ImageNotFoundError(f"Image '{image}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to create container: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error creating container: {e}") from e

    async def start_container(self, container_id: str) -> None:
        """Start a created container.

        Raises:
            ContainerNotFoundError: If container not found
            DockerServiceError: If start fails
        """
        try:
            await asyncio.to_thread(self.client.api.start, container_id)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(f"Container '{container_id}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to start container: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error starting container: {e}") from e

    async def inspect_container(self, container_id: str) -> ContainerRecord:
        """Inspect a container by id or name.

        Raises:
            ContainerNotFoundError: If container not found
            DockerServiceError: If inspection fails
        """
        try:
            container = await asyncio.to_thread(self.client.containers.get, container_id)
            return ContainerRecord.from_attrs(container.attrs)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(f"Container '{container_id}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to inspect container: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error inspecting container: {e}") from e

    async def stop_container(self, container_id: str, timeout: Optional[int] = None) -> None:
        """Stop a running container.

        Args:
            container_id: Container id
            timeout: Seconds to wait before the daemon kills the container

        Raises:
            ContainerNotFoundError: If container not found
            DockerServiceError: If stop fails
        """
        try:
            if timeout is None:
                await asyncio.to_thread(self.client.api.stop, container_id)
            else:
                await asyncio.to_thread(self.client.api.stop, container_id, timeout=timeout)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(f"Container '{container_id}' not found") from e
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to stop container: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error stopping container: {e}") from e

    async def remove_container(self, container_id: str, force: bool = False) -> None:
        """Remove a container.

        Args:
            container_id: Container id
            force: Force remove even if running

        Raises:
            ContainerNotFoundError: If container not found
            RemovalInProgressError: If the daemon is already removing it
            ResourceConflictError: If the container is running
            DockerServiceError: If removal fails
        """
        try:
            await asyncio.to_thread(self.client.api.remove_container, container_id, force=force)
        except docker.errors.NotFound as e:
            raise ContainerNotFoundError(f"Container '{container_id}' not found") from e
        except docker.errors.APIError as e:
            if e.status_code == 409:
                raise _conflict_error(e, f"Cannot remove container '{container_id}'") from e
            raise DockerServiceError(f"Failed to remove container: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error removing container: {e}") from e

    async def list_containers(self, all: bool = True) -> List[str]:
        """List container ids.

        Args:
            all: Include stopped containers

        Raises:
            DockerServiceError: If listing fails
        """
        try:
            containers = await asyncio.to_thread(self.client.api.containers, all=all, quiet=True)
            return [container['Id'] for container in containers]
        except docker.errors.APIError as e:
            raise DockerServiceError(f"Failed to list containers: {e}") from e
        except Exception as e:
            raise DockerServiceError(f"Unexpected error listing containers: {e}") from e
