"""SQL-backed key-value store.

Implements KeyValueStore on top of the kv_entries table. Conditional
writes are a single ``UPDATE ... WHERE version = :expected`` so the
database arbitrates concurrent writers.
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from procurement.domain.exceptions import VersionConflictError
from procurement.infrastructure.database import init_models
from procurement.infrastructure.models import KeyValueEntryModel
from procurement.infrastructure.store import KeyValueStore, StoredEntry

logger = structlog.get_logger()


class SqlKeyValueStore(KeyValueStore):
    """Key-value store persisted through SQLAlchemy async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize store.

        Args:
            session_factory: Factory for async sessions.
            engine: Engine to dispose on close, if owned by the store.
        """
        self._session_factory = session_factory
        self._engine = engine

    async def get_entry(self, key: str) -> StoredEntry | None:
        async with self._session_factory() as session:
            row = await session.get(KeyValueEntryModel, key)
            if row is None:
                return None
            return StoredEntry(value=row.value, version=row.version)

    async def set(self, key: str, value: str) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(KeyValueEntryModel, key, with_for_update=True)
                if row is None:
                    session.add(KeyValueEntryModel(key=key, value=value, version=1))
                    return 1
                row.value = value
                row.version = row.version + 1
                return row.version

    async def compare_and_set(self, key: str, value: str, expected_version: int | None) -> int:
        if expected_version is None:
            return await self._insert(key, value)

        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(KeyValueEntryModel)
                    .where(
                        KeyValueEntryModel.key == key,
                        KeyValueEntryModel.version == expected_version,
                    )
                    .values(
                        value=value,
                        version=expected_version + 1,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
        if result.rowcount != 1:
            actual = await self._current_version(key)
            logger.warning(
                "Conditional write rejected",
                key=key,
                expected_version=expected_version,
                actual_version=actual,
            )
            raise VersionConflictError(key, expected_version, actual)
        return expected_version + 1

    async def compare_and_delete(self, key: str, expected_version: int) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(KeyValueEntryModel).where(
                        KeyValueEntryModel.key == key,
                        KeyValueEntryModel.version == expected_version,
                    )
                )
        if result.rowcount != 1:
            actual = await self._current_version(key)
            logger.warning(
                "Conditional delete rejected",
                key=key,
                expected_version=expected_version,
                actual_version=actual,
            )
            raise VersionConflictError(key, expected_version, actual)

    async def keys(self, prefix: str) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KeyValueEntryModel.key)
                .where(KeyValueEntryModel.key.startswith(prefix, autoescape=True))
                .order_by(KeyValueEntryModel.key)
            )
            return list(result.scalars().all())

    async def initialize(self) -> None:
        if self._engine is not None:
            await init_models(self._engine)
            logger.info("Database tables ready")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    async def _insert(self, key: str, value: str) -> int:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(KeyValueEntryModel(key=key, value=value, version=1))
        except IntegrityError as e:
            actual = await self._current_version(key)
            raise VersionConflictError(key, 0, actual) from e
        return 1

    async def _current_version(self, key: str) -> int | None:
        entry = await self.get_entry(key)
        return entry.version if entry else None
