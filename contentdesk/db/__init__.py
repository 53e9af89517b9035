from contentdesk.db.base import Base, IDMixin, OwnedMixin, TimestampMixin, as_utc, utcnow
from contentdesk.db.session import SessionLocal, engine, get_db

__all__ = [
    "Base",
    "IDMixin",
    "OwnedMixin",
    "TimestampMixin",
    "as_utc",
    "utcnow",
    "engine",
    "SessionLocal",
    "get_db",
]
