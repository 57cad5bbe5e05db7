import os
import tarfile
from datetime import datetime, timezone
from typing import Dict, List

import pytest
from click.testing import CliRunner

from shell_container.models.config import ManagerConfig
from shell_container.models.container import ContainerRecord
from shell_container.models.image import ImageRecord
from shell_container.services.exceptions import (
    BuildFailedError,
    ContainerNotFoundError,
    ImageNotFoundError,
    ResourceConflictError,
)

IMAGE_CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
CONTEXT_FILES = ["Dockerfile", "entrypoint.sh", "splash.sh", "tunnel.sh"]


class FakeDockerService:
    """In-memory stand-in for DockerService.

    Mirrors the daemon behaviour the managers rely on: auto-remove
    containers vanish once stopped, running containers refuse a plain
    remove, and unknown ids raise the not-found errors.
    """

    def __init__(self):
        self.images: Dict[str, ImageRecord] = {}
        self.containers: Dict[str, dict] = {}
        self.ghost_ids: List[str] = []
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self.build_events = [{"stream": "Step 1/2 : FROM alpine\n"}, {"stream": "Successfully built\n"}]
        self.build_error = None
        self.built_archives: List[List[str]] = []
        self._counter = 0

    # Test setup helpers

    def add_image(self, image_id: str, tags=None, created=IMAGE_CREATED) -> ImageRecord:
        image = ImageRecord(id=image_id, tags=list(tags or []), created=created)
        self.images[image_id] = image
        return image

    def add_container(self, container_id: str, name: str = None, running: bool = False,
                      auto_remove: bool = False) -> None:
        self.containers[container_id] = {
            "name": name or container_id,
            "running": running,
            "auto_remove": auto_remove,
        }

    def fail(self, operation: str, target=None, error: Exception = None) -> None:
        self.failures[(operation, target)] = error

    def _record(self, operation: str, target=None) -> None:
        self.calls.append((operation, target))
        for key in ((operation, target), (operation, None)):
            if key in self.failures:
                raise self.failures[key]

    def _require_container(self, container_id: str) -> dict:
        if container_id not in self.containers:
            raise ContainerNotFoundError(f"Container '{container_id}' not found")
        return self.containers[container_id]

    # Images

    async def inspect_image(self, tag):
        self._record("inspect_image", tag)
        for image in self.images.values():
            if image.id == tag or image.has_tag(tag):
                return image
        raise ImageNotFoundError(f"Image '{tag}' not found")

    async def list_images(self):
        self._record("list_images")
        return list(self.images.values())

    async def remove_image(self, image_id, force=True):
        self._record("remove_image", image_id)
        if image_id not in self.images:
            raise ImageNotFoundError(f"Image '{image_id}' not found")
        del self.images[image_id]

    async def build_image(self, fileobj, tag, on_progress=None):
        self._record("build_image", tag)
        with tarfile.open(fileobj=fileobj) as tar:
            self.built_archives.append(tar.getnames())
        for event in self.build_events:
            if on_progress is not None:
                on_progress(event)
        if self.build_error:
            raise BuildFailedError(self.build_error, list(self.build_events))
        self._counter += 1
        self.add_image(f"sha256:built{self._counter}", [tag], datetime.now(timezone.utc))
        return list(self.build_events)

    # Containers

    async def create_container(self, image, command=None, tty=False, stdin_open=False,
                               auto_remove=False, **kwargs):
        self._record("create_container", image)
        if not any(img.has_tag(image) for img in self.images.values()):
            raise ImageNotFoundError(f"Image '{image}' not found")
        self._counter += 1
        container_id = f"{self._counter:064x}"
        self.add_container(container_id, f"/session_{self._counter}", auto_remove=auto_remove)
        self.containers[container_id].update(command=command, tty=tty, stdin_open=stdin_open)
        return container_id

    async def start_container(self, container_id):
        self._record("start_container", container_id)
        self._require_container(container_id)["running"] = True

    async def inspect_container(self, container_id):
        self._record("inspect_container", container_id)
        container = self._require_container(container_id)
        return ContainerRecord.from_attrs({
            "Id": container_id,
            "Name": container["name"],
            "State": {"Running": container["running"]},
            "HostConfig": {"AutoRemove": container["auto_remove"]},
        })

    async def stop_container(self, container_id, timeout=None):
        self._record("stop_container", container_id)
        container = self._require_container(container_id)
        container["running"] = False
        if container["auto_remove"]:
            del self.containers[container_id]

    async def remove_container(self, container_id, force=False):
        self._record("remove_container", container_id)
        container = self._require_container(container_id)
        if container["running"] and not force:
            raise ResourceConflictError(f"Cannot remove container '{container_id}': container is running")
        del self.containers[container_id]

    async def list_containers(self, all=True):
        self._record("list_containers")
        ids = [cid for cid, c in self.containers.items() if all or c["running"]]
        return ids + list(self.ghost_ids)


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def fake_docker():
    """Provides an in-memory Docker service."""
    return FakeDockerService()


@pytest.fixture
def context_dir(tmp_path):
    """Creates a build context whose files all predate the cached image."""
    directory = tmp_path / "container"
    directory.mkdir()
    for name in CONTEXT_FILES:
        path = directory / name
        path.write_text(f"# {name}\n")
        set_mtime(path, IMAGE_CREATED.timestamp() - 3600)
    return directory


@pytest.fixture
def manager_config(context_dir):
    """Provides a configuration pointing at the temporary build context."""
    return ManagerConfig(image_name="webshell", context_dir=context_dir)


def set_mtime(path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def image_created():
    """Creation time given to pre-existing images."""
    return IMAGE_CREATED


@pytest.fixture
def touch():
    """Sets a file's modification time to a unix timestamp."""
    return set_mtime
