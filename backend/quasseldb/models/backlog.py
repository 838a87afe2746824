# backend/quasseldb/models/backlog.py
"""
Backlog models.

Maps to:
- sender table - nick!user@host identities
- backlog table - persisted messages and events per buffer

The core stores backlog.time as a timestamp column on PostgreSQL and as
INTEGER epoch milliseconds on SQLite; BacklogTime hides the difference.
"""

from datetime import datetime, timedelta

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
)

from quasseldb.base import Base


class BacklogTime(TypeDecorator):
    """Naive local datetime in Python, epoch milliseconds on SQLite."""

    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(DateTime())

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        seconds = int(value.replace(microsecond=0).timestamp())
        return seconds * 1000 + value.microsecond // 1000

    def process_result_value(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        millis = int(value)
        return datetime.fromtimestamp(millis // 1000) + timedelta(
            milliseconds=millis % 1000
        )


class Sender(Base):
    __tablename__ = "sender"

    senderid = Column(Integer, primary_key=True, autoincrement=True)
    sender = Column(String(128), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Sender(senderid={self.senderid}, sender={self.sender})>"


class Backlog(Base):
    """A single backlog entry; type holds one BacklogType bit."""

    __tablename__ = "backlog"

    messageid = Column(Integer, primary_key=True, autoincrement=True)
    time = Column(BacklogTime, nullable=False)
    bufferid = Column(Integer, ForeignKey("buffer.bufferid"), nullable=False)
    type = Column(Integer, nullable=False)
    flags = Column(Integer, nullable=False, default=0, server_default="0")
    senderid = Column(Integer, ForeignKey("sender.senderid"), nullable=False)
    message = Column(Text)

    __table_args__ = (Index("backlog_bufferid_idx", "bufferid", "messageid"),)

    def to_dict(self) -> dict:
        return {
            "messageid": self.messageid,
            "time": self.time,
            "bufferid": self.bufferid,
            "type": self.type,
            "flags": self.flags,
            "senderid": self.senderid,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"<Backlog(messageid={self.messageid}, bufferid={self.bufferid})>"
