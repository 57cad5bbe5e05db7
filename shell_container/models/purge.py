"""Purge result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class PurgeAction(str, Enum):
    """What a purge pass did with one container."""

    KEPT = "kept"
    REMOVED = "removed"
    STOPPED_AND_REMOVED = "stopped_and_removed"
    ALREADY_GONE = "already_gone"
    FAILED = "failed"


@dataclass
class PurgeOutcome:
    """Outcome for a single container."""

    container_id: str
    action: PurgeAction
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.action != PurgeAction.FAILED


@dataclass
class PurgeReport:
    """Summary of a purge pass."""

    considered: int = 0
    outcomes: List[PurgeOutcome] = field(default_factory=list)
    aborted: bool = False
    error: Optional[str] = None

    def _ids(self, *actions: PurgeAction) -> List[str]:
        return [o.container_id for o in self.outcomes if o.action in actions]

    @property
    def kept(self) -> List[str]:
        return self._ids(PurgeAction.KEPT)

    @property
    def removed(self) -> List[str]:
        return self._ids(
            PurgeAction.REMOVED,
            PurgeAction.STOPPED_AND_REMOVED,
            PurgeAction.ALREADY_GONE
        )

    @property
    def failed(self) -> List[str]:
        return self._ids(PurgeAction.FAILED)
