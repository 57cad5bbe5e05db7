"""Core functionality for Shell Container."""

from .build_context import BuildContext
from .image_cache import BuildHandle, ImageCacheManager
from .lifecycle import ContainerLifecycleManager
from .purge import PurgeEngine

__all__ = [
    'BuildContext',
    'BuildHandle',
    'ImageCacheManager',
    'ContainerLifecycleManager',
    'PurgeEngine'
]
