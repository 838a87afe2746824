# backend/quasseldb/models/buffer.py
"""
Buffer model.

Maps to:
- buffer table - channels, queries and status buffers of a network

userid is denormalized in the core schema, so buffers are fetched by
userid directly without joining network.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String

from quasseldb.base import Base


class Buffer(Base):
    __tablename__ = "buffer"

    bufferid = Column(Integer, primary_key=True, autoincrement=True)
    userid = Column(Integer, ForeignKey("quasseluser.userid"), nullable=False)
    networkid = Column(Integer, ForeignKey("network.networkid"), nullable=False)
    buffername = Column(String(128), nullable=False)
    buffercname = Column(String(128), nullable=False)
    buffertype = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (Index("buffer_userid_idx", "userid"),)

    def __repr__(self) -> str:
        return f"<Buffer(bufferid={self.bufferid}, name={self.buffername})>"
