"""Keeps the cached session image in step with its build context."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional

from ..models.config import ManagerConfig
from ..models.image import EPOCH, BuildResult, ImageRecord
from ..services.docker_service import DockerService
from ..services.exceptions import ServiceError
from .build_context import BuildContext

logger = logging.getLogger(__name__)

_BUILD_FINISHED = object()


class BuildHandle:
    """A build running in the background.

    The build is started by :meth:`ImageCacheManager.rebuild` and runs on
    its own task; callers that need the image must await :meth:`wait`.
    """

    def __init__(self, tag: str):
        self.tag = tag
        self._events: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._progress_taken = False

    def _publish(self, event: dict) -> None:
        logger.debug(event)
        self._events.put_nowait(event)

    def _finish(self) -> None:
        self._events.put_nowait(_BUILD_FINISHED)

    def _attach(self, task: asyncio.Task) -> None:
        self._task = task
        task.add_done_callback(self._log_result)

    def _log_result(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning(f"Build of Docker image \"{self.tag}\" was cancelled")
            return
        result = task.result()
        if result.succeeded:
            logger.info(f"Docker image \"{self.tag}\" created successfully")
        else:
            logger.error(f"Failed to build Docker image \"{self.tag}\": {result.error}")

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> BuildResult:
        """Wait for the build to finish and return its result."""
        return await self._task

    async def progress(self) -> AsyncIterator[dict]:
        """Yield build events as they arrive until the build ends.

        The stream can only be consumed once.
        """
        if self._progress_taken:
            raise RuntimeError("Build progress can only be consumed once")
        self._progress_taken = True
        while True:
            event = await self._events.get()
            if event is _BUILD_FINISHED:
                return
            yield event


class ImageCacheManager:
    """Rebuilds the cached image when its build inputs change."""

    def __init__(
        self,
        docker_service: DockerService,
        config: ManagerConfig,
        context: Optional[BuildContext] = None,
    ):
        self.docker_service = docker_service
        self.config = config
        self.context = context or BuildContext.from_config(config)
        self.current_build: Optional[BuildHandle] = None

    @property
    def image_tag(self) -> str:
        return self.config.image_tag

    async def read_input_timestamps(self) -> Dict[Path, datetime]:
        return await self.context.read_timestamps()

    async def image_created_at(self) -> datetime:
        """Creation time of the cached image, or the epoch if it can't be found."""
        try:
            image = await self.docker_service.inspect_image(self.image_tag)
            return image.created
        except ServiceError as e:
            logger.debug(f"Treating image \"{self.image_tag}\" as never built: {e}")
            return EPOCH

    async def remove_dangling_images(self, images: List[ImageRecord]) -> List[str]:
        """Force-remove every untagged image.

        Failures are logged and skipped. Returns the ids that were removed.
        """
        removed = []
        for image in images:
            if not image.is_dangling:
                continue
            logger.info(f"Removing dangling image: {image.id}")
            try:
                await self.docker_service.remove_image(image.id, force=True)
            except ServiceError as e:
                logger.error(f"Failed to remove dangling image {image.id}: {e}")
                continue
            logger.info(f"Dangling image {image.id} removed successfully.")
            removed.append(image.id)
        return removed

    @staticmethod
    def is_stale(timestamps: Dict[Path, datetime], created_at: datetime) -> bool:
        """True if any build input was modified after the image was created."""
        newer = [path for path, mtime in timestamps.items() if mtime > created_at]
        for path in newer:
            logger.debug(f"{path} changed after image creation")
        return bool(newer)

    async def rebuild(self, images: Optional[List[ImageRecord]] = None) -> BuildHandle:
        """Replace the cached image and start building a new one.

        The old image is removed before the build starts, so at most one
        image ever carries the tag. Removal errors propagate; the build
        itself runs in the background. The build context is packed first so
        a missing source file leaves the old image in place.
        """
        archive = self.context.archive()
        if images is None:
            images = await self.docker_service.list_images()

        existing = next((image for image in images if image.has_tag(self.image_tag)), None)
        if existing:
            logger.info(f"Removing existing image \"{self.image_tag}\"")
            await self.docker_service.remove_image(existing.id, force=True)
            logger.info(f"Image \"{self.image_tag}\" removed successfully.")
        else:
            logger.info(f"Image \"{self.image_tag}\" does not exist.")

        logger.info(f"Creating new Docker image \"{self.image_tag}\".")
        handle = BuildHandle(self.image_tag)
        handle._attach(asyncio.create_task(self._run_build(handle, archive)))
        self.current_build = handle
        return handle

    async def _run_build(self, handle: BuildHandle, archive) -> BuildResult:
        try:
            output = await self.docker_service.build_image(
                archive, self.image_tag, on_progress=handle._publish
            )
            return BuildResult(tag=self.image_tag, succeeded=True, output=output)
        except ServiceError as e:
            return BuildResult(
                tag=self.image_tag,
                succeeded=False,
                output=getattr(e, 'output', []),
                error=e
            )
        finally:
            handle._finish()

    async def ensure_fresh(self) -> Optional[BuildHandle]:
        """Clean up dangling images and rebuild the cached image if stale.

        Returns the running build, or None when nothing was built. Never
        raises; failures are logged.
        """
        try:
            timestamps = await self.read_input_timestamps()
            created_at = await self.image_created_at()
            images = await self.docker_service.list_images()
            await self.remove_dangling_images(images)

            if not self.is_stale(timestamps, created_at):
                logger.info(f"Docker image \"{self.image_tag}\" is up to date.")
                return None
            return await self.rebuild(images)
        except (ServiceError, OSError) as e:
            logger.error(f"Failed to create Docker image: {e}")
            return None
