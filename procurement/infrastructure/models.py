"""SQLAlchemy models for database tables.

Provides the ORM model backing the SQL key-value store.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from procurement.infrastructure.database import Base


class KeyValueEntryModel(Base):
    """Versioned key-value entry.

    Holds one JSON document per key. The version column is checked and
    bumped by every conditional write.
    """

    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
