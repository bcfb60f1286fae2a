"""A subset of core tables keyed by user id.

Only the tables the cleaner is routinely exercised against are mapped here; the rest of the
registry in ``services.user_purge`` is probed at runtime.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from datacleaner.db.base import Base


class RoleAssignment(Base):
    __tablename__ = "role_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    roleid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    contextid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class UserSession(Base):
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sid: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class LogstoreStandardLog(Base):
    __tablename__ = "logstore_standard_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    eventname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class Message(Base):
    __tablename__ = "message"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    useridfrom: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    useridto: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    subject: Mapped[str | None] = mapped_column(Text, nullable=True)
