from sqlalchemy import Boolean, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from datacleaner.db.base import Base


class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    auth: Mapped[str] = mapped_column(String(20), nullable=False, default="manual")
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    last_access: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_modified: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
