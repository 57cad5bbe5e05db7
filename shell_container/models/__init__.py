"""Models for Shell Container."""

from .config import ManagerConfig
from .container import ContainerPresence, ContainerRecord
from .image import BuildResult, ImageRecord, parse_docker_timestamp
from .purge import PurgeAction, PurgeOutcome, PurgeReport

__all__ = [
    'ManagerConfig',
    'ContainerPresence',
    'ContainerRecord',
    'BuildResult',
    'ImageRecord',
    'parse_docker_timestamp',
    'PurgeAction',
    'PurgeOutcome',
    'PurgeReport'
]
