"""Build context the cached image is built from."""

import asyncio
import io
import tarfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable


class BuildContext:
    """A directory of build inputs.

    ``watched_files`` decide whether the cached image is stale;
    ``source_files`` are the files sent to the daemon when building.
    """

    def __init__(self, directory: Path, watched_files: Iterable[str], source_files: Iterable[str]):
        self.directory = Path(directory)
        self.watched_files = list(watched_files)
        self.source_files = list(source_files)

    @classmethod
    def from_config(cls, config) -> 'BuildContext':
        return cls(config.context_dir, config.watched_files, config.source_files)

    @staticmethod
    def _mtime(path: Path) -> datetime:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    async def read_timestamps(self) -> Dict[Path, datetime]:
        """Stat every watched file concurrently.

        Raises:
            OSError: If any watched file cannot be read
        """
        paths = [self.directory / name for name in self.watched_files]
        mtimes = await asyncio.gather(
            *(asyncio.to_thread(self._mtime, path) for path in paths)
        )
        return dict(zip(paths, mtimes))

    def archive(self) -> io.BytesIO:
        """Pack the source files into an in-memory tar archive.

        Raises:
            OSError: If a source file is missing
        """
        tar_stream = io.BytesIO()
        with tarfile.open(fileobj=tar_stream, mode='w') as tar:
            for name in self.source_files:
                tar.add(str(self.directory / name), arcname=name)

        tar_stream.seek(0)
        return tar_stream
