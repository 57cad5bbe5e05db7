"""Container models."""

from dataclasses import dataclass
from enum import Enum


class ContainerPresence(Enum):
    """Result of asking the daemon whether a container exists."""

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"  # inspection failed for a reason other than not-found


@dataclass
class ContainerRecord:
    """A container as reported by the daemon's inspect endpoint."""

    id: str
    name: str
    running: bool
    auto_remove: bool = False

    @classmethod
    def from_attrs(cls, attrs: dict) -> 'ContainerRecord':
        """Create from a docker-py container ``attrs`` dictionary."""
        raw_name = attrs.get('Name', '')
        # The daemon prefixes names with a single '/'
        name = raw_name[1:] if raw_name.startswith('/') else raw_name
        return cls(
            id=attrs.get('Id', ''),
            name=name,
            running=bool(attrs.get('State', {}).get('Running', False)),
            auto_remove=bool(attrs.get('HostConfig', {}).get('AutoRemove', False))
        )
