# aclio/models/kv_entry.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime
from aclio.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class KVEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String(128), primary_key=True)
    # JSON-encoded value
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<KVEntry key={self.key}>"
