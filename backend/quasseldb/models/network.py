# backend/quasseldb/models/network.py
"""
Network model.

Maps to:
- network table - IRC network configurations owned by a core user
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, false, true

from quasseldb.base import Base


class Network(Base):
    __tablename__ = "network"

    networkid = Column(Integer, primary_key=True, autoincrement=True)
    userid = Column(Integer, ForeignKey("quasseluser.userid"), nullable=False)
    networkname = Column(String(32), nullable=False)
    useautoreconnect = Column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    connected = Column(Boolean, nullable=False, default=False, server_default=false())

    def __repr__(self) -> str:
        return f"<Network(networkid={self.networkid}, name={self.networkname})>"
