"""Blob storage for profile images, keyed by filename."""
import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Protocol

from nested_students.exceptions import BlobNotFound, InvalidBlobName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlobUpload:
    filename: str
    file: BinaryIO


class BlobStore(Protocol):
    async def save(self, upload: BlobUpload) -> str:
        """Store the upload and return the name it can be fetched by."""
        ...

    async def delete(self, name: str) -> None:
        """Remove a blob. Raises BlobNotFound if nothing is stored under name."""
        ...


def safe_blob_name(filename: str) -> str:
    """Reduce an uploaded filename to its last path component."""
    name = PurePosixPath(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise InvalidBlobName(filename)
    return name


class LocalBlobStore:
    """Files in a single directory, named after the original upload.

    Uploading a name that already exists overwrites it silently.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        return self.root / safe_blob_name(name)

    def _write_sync(self, path: Path, src: BinaryIO) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as buffer:
            shutil.copyfileobj(src, buffer)

    def _unlink_sync(self, name: str) -> None:
        try:
            self._path(name).unlink()
        except FileNotFoundError as e:
            raise BlobNotFound(name) from e

    async def save(self, upload: BlobUpload) -> str:
        path = self._path(upload.filename)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_sync, path, upload.file)
        logger.debug("Stored blob %s", path.name)
        return path.name

    async def delete(self, name: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._unlink_sync, name)
        logger.debug("Deleted blob %s", name)
