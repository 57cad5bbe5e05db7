"""Image models for Shell Container."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

# Docker reports untagged layers with this placeholder instead of a tag
UNTAGGED_SENTINELS = frozenset({"<none>", "<none>:<none>"})

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_FRACTION = re.compile(r"\.(\d+)")


def parse_docker_timestamp(value: Union[str, int, float, None]) -> datetime:
    """Parse a Docker creation timestamp into an aware UTC datetime.

    Image inspect records carry RFC 3339 strings with nanosecond precision
    (``2024-01-15T10:30:00.123456789Z``) while image listings carry unix
    seconds. Python only keeps microseconds, so the fraction is truncated.
    """
    if value is None or value == "":
        return EPOCH
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class ImageRecord:
    """An image as reported by the daemon."""

    id: str
    tags: List[str] = field(default_factory=list)
    created: datetime = EPOCH

    @property
    def is_dangling(self) -> bool:
        """True when the image has no tag other than the untagged placeholder."""
        return all(tag in UNTAGGED_SENTINELS for tag in self.tags)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    @classmethod
    def from_attrs(cls, attrs: dict) -> 'ImageRecord':
        """Create from a docker-py image ``attrs`` dictionary."""
        return cls(
            id=attrs.get('Id', ''),
            tags=list(attrs.get('RepoTags') or []),
            created=parse_docker_timestamp(attrs.get('Created'))
        )


@dataclass
class BuildResult:
    """Terminal result of an image build."""

    tag: str
    succeeded: bool
    output: List[Any] = field(default_factory=list)
    error: Optional[BaseException] = None
