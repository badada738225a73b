"""Storage for uploaded cost proof files."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path


class BlobStore(ABC):
    """Stores file content and returns a URL to reach it."""

    @abstractmethod
    async def put(self, filename: str, data: bytes, content_type: str) -> str:
        """Store a file.

        Returns:
            Public URL of the stored file.
        """


class LocalBlobStore(BlobStore):
    """Writes files to a local directory served under ``/files``."""

    def __init__(self, directory: str | Path, public_base_url: str) -> None:
        self.directory = Path(directory)
        self.public_base_url = public_base_url.rstrip("/")

    async def put(self, filename: str, data: bytes, content_type: str) -> str:
        await asyncio.to_thread(self._write, filename, data)
        return f"{self.public_base_url}/files/{filename}"

    def _write(self, filename: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / filename).write_bytes(data)


class InMemoryBlobStore(BlobStore):
    """Keeps files in memory, for tests."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}

    async def put(self, filename: str, data: bytes, content_type: str) -> str:
        self.files[filename] = (data, content_type)
        return f"memory://{filename}"
