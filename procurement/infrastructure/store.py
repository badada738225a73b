"""Key-value persistence for procurement requests.

Provides the KeyValueStore contract, an in-memory implementation used in
development and tests, and the RequestRepository that maps request
aggregates onto JSON documents under the ``request:`` key prefix.

Every stored value carries a version. Writers read a version and write
back with compare_and_set, so two concurrent updates of the same request
cannot silently overwrite each other.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from procurement.domain.entities import ProcurementRequest
from procurement.domain.exceptions import (
    DomainError,
    RequestAlreadyExistsError,
    UpstreamFailureError,
    VersionConflictError,
)

logger = structlog.get_logger()

REQUEST_KEY_PREFIX = "request:"


@dataclass(frozen=True)
class StoredEntry:
    """A stored value together with its version."""

    value: str
    version: int


# ============================================================================
# Key-Value Store Contract
# ============================================================================


class KeyValueStore(ABC):
    """Minimal key-value contract.

    Versions start at 1 when a key is created and increase by one on
    every write.
    """

    @abstractmethod
    async def get_entry(self, key: str) -> StoredEntry | None:
        """Get value and version for a key, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> int:
        """Write a value unconditionally.

        Returns:
            The new version.
        """

    @abstractmethod
    async def compare_and_set(self, key: str, value: str, expected_version: int | None) -> int:
        """Write a value only if the stored version matches.

        Args:
            key: Key to write.
            value: New value.
            expected_version: Version the caller read, or None to require
                that the key does not exist yet.

        Returns:
            The new version.

        Raises:
            VersionConflictError: If the stored version differs.
        """

    @abstractmethod
    async def compare_and_delete(self, key: str, expected_version: int) -> None:
        """Delete a key only if the stored version matches.

        Raises:
            VersionConflictError: If the key is gone or its version differs.
        """

    @abstractmethod
    async def keys(self, prefix: str) -> list[str]:
        """List keys starting with prefix."""

    async def get(self, key: str) -> str | None:
        entry = await self.get_entry(key)
        return entry.value if entry else None

    async def initialize(self) -> None:
        """Prepare backing storage (tables, connections)."""

    async def close(self) -> None:
        """Release resources held by the store."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store guarded by an asyncio lock."""

    def __init__(self) -> None:
        self._entries: dict[str, StoredEntry] = {}
        self._lock = asyncio.Lock()

    async def get_entry(self, key: str) -> StoredEntry | None:
        return self._entries.get(key)

    async def set(self, key: str, value: str) -> int:
        async with self._lock:
            current = self._entries.get(key)
            version = current.version + 1 if current else 1
            self._entries[key] = StoredEntry(value=value, version=version)
            return version

    async def compare_and_set(self, key: str, value: str, expected_version: int | None) -> int:
        async with self._lock:
            current = self._entries.get(key)
            actual = current.version if current else None
            if actual != expected_version:
                raise VersionConflictError(key, expected_version or 0, actual)
            version = (expected_version or 0) + 1
            self._entries[key] = StoredEntry(value=value, version=version)
            return version

    async def compare_and_delete(self, key: str, expected_version: int) -> None:
        async with self._lock:
            current = self._entries.get(key)
            actual = current.version if current else None
            if actual != expected_version:
                raise VersionConflictError(key, expected_version, actual)
            del self._entries[key]

    async def keys(self, prefix: str) -> list[str]:
        return [key for key in self._entries if key.startswith(prefix)]


# ============================================================================
# Request Repository
# ============================================================================


@contextmanager
def _store_call(operation: str, **context) -> Iterator[None]:
    """Convert low-level store failures into UpstreamFailureError."""
    try:
        yield
    except DomainError:
        raise
    except Exception as e:
        logger.error("Store operation failed", operation=operation, error=str(e), **context)
        raise UpstreamFailureError(operation) from e


class RequestRepository:
    """Maps ProcurementRequest aggregates onto versioned JSON documents."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def key_for(request_id: str) -> str:
        return f"{REQUEST_KEY_PREFIX}{request_id}"

    async def get(self, request_id: str) -> ProcurementRequest | None:
        """Load a request by ID.

        Raises:
            UpstreamFailureError: If the store fails or the document is corrupt.
        """
        with _store_call("read request", request_id=request_id):
            entry = await self.store.get_entry(self.key_for(request_id))
            if entry is None:
                return None
            return self._decode(entry)

    async def list_all(self) -> list[ProcurementRequest]:
        """Load every request, newest first.

        Keys that vanish between listing and reading, and documents that
        cannot be decoded, are skipped.
        """
        with _store_call("list requests"):
            keys = await self.store.keys(REQUEST_KEY_PREFIX)
            ranked = []
            for key in keys:
                entry = await self.store.get_entry(key)
                if entry is None:
                    continue
                try:
                    request = self._decode(entry)
                    ranked.append((request.sort_key, request))
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning("Skipping undecodable request document", key=key, error=str(e))
        ranked.sort(key=lambda pair: pair[0], reverse=True)
        return [request for _, request in ranked]

    async def add(self, request: ProcurementRequest) -> None:
        """Persist a new request.

        Raises:
            RequestAlreadyExistsError: If the ID is taken.
        """
        request.version = 1
        try:
            with _store_call("create request", request_id=request.id):
                await self.store.compare_and_set(
                    self.key_for(request.id), self._encode(request), expected_version=None
                )
        except VersionConflictError as e:
            raise RequestAlreadyExistsError(request.id) from e

    async def save(self, request: ProcurementRequest) -> None:
        """Persist changes to an existing request.

        The write only succeeds if nobody else wrote since the request was
        loaded; the aggregate's version is bumped on success.

        Raises:
            VersionConflictError: On a concurrent write.
        """
        expected = request.version
        request.version = expected + 1
        try:
            with _store_call("update request", request_id=request.id):
                await self.store.compare_and_set(
                    self.key_for(request.id), self._encode(request), expected_version=expected
                )
        except DomainError:
            request.version = expected
            raise

    async def delete(self, request: ProcurementRequest) -> None:
        """Delete a request as loaded.

        Raises:
            VersionConflictError: If the request was written since it was loaded.
        """
        with _store_call("delete request", request_id=request.id):
            await self.store.compare_and_delete(self.key_for(request.id), request.version)

    @staticmethod
    def _encode(request: ProcurementRequest) -> str:
        return json.dumps(request.to_document())

    @staticmethod
    def _decode(entry: StoredEntry) -> ProcurementRequest:
        request = ProcurementRequest.from_document(json.loads(entry.value))
        request.version = entry.version
        return request
