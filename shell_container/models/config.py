"""Manager configuration model."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator


class ManagerConfig(BaseModel):
    """Configuration shared by the image, lifecycle and purge managers."""
    image_name: str
    context_dir: Path = Path("container")
    watched_files: List[str] = Field(
        default_factory=lambda: ["Dockerfile", "entrypoint.sh", "splash.sh"]
    )
    source_files: List[str] = Field(
        default_factory=lambda: ["Dockerfile", "entrypoint.sh", "splash.sh", "tunnel.sh"]
    )
    shell: str = "/bin/ash"
    stop_timeout: int = 10  # seconds before the daemon sends SIGKILL

    @field_validator("image_name")
    @classmethod
    def reject_tag(cls, v: str) -> str:
        # A registry host:port may precede the last '/', a tag may not follow it
        if not v:
            raise ValueError("image name must not be empty")
        if ':' in v.rsplit('/', 1)[-1] or '@' in v:
            raise ValueError(
                f"image name '{v}' must not carry a tag or digest; the image is always built as ':latest'"
            )
        return v

    @property
    def image_tag(self) -> str:
        """Tag the cached image is built under."""
        return f"{self.image_name}:latest"
