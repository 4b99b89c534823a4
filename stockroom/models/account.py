from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from ..db.session import Base

# MySQL/MariaDB compare case-insensitively by default; a binary collation keeps
# "Bob" and "bob" distinct there. SQLite and PostgreSQL are binary already.
_NAME_TYPE = String(255).with_variant(String(255, collation="utf8mb4_bin"), "mysql", "mariadb")


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(_NAME_TYPE, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    # Naive UTC.
    last_login_at = Column(DateTime, nullable=True)
