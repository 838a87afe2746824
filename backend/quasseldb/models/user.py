# backend/quasseldb/models/user.py
"""
User model for core authentication.

Maps to:
- quasseluser table - one row per core account

hashversion selects how password was produced:
0 = unsalted SHA-1 hex digest, 1 = "<sha512 hex>:<salt>".
"""

from sqlalchemy import Column, Integer, String, Text

from quasseldb.base import Base


class QuasselUser(Base):
    __tablename__ = "quasseluser"

    userid = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True)
    password = Column(Text, nullable=False)
    hashversion = Column(Integer, nullable=False, default=0, server_default="0")
    authenticator = Column(
        String(64), nullable=False, default="Database", server_default="Database"
    )

    def __repr__(self) -> str:
        return f"<QuasselUser(userid={self.userid}, username={self.username})>"
