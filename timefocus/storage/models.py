"""SQLAlchemy ORM models for TimeFocus."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class KeyValue(Base):
    """One serialized record per key (settings, history, stats, ...)."""

    __tablename__ = "key_values"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now,
                        onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<KeyValue key={self.key} size={len(self.value or '')}>"
