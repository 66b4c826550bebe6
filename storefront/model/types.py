# storefront/model/types.py
import uuid
from datetime import datetime, timezone

from sqlalchemy.types import TypeDecorator, CHAR
from sqlalchemy.dialects.postgresql import UUID as PG_UUID


class GUID(TypeDecorator):
    """UUID primary/foreign keys: native on PostgreSQL, CHAR(36) elsewhere."""
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = as_uuid(value)
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def as_uuid(value) -> uuid.UUID:
    """Coerce a UUID or its string form; raises ValueError otherwise."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def utcnow() -> datetime:
    # naive UTC, matching how DateTime columns are stored
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None
