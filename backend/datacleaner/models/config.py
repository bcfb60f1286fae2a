from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from datacleaner.db.base import Base


class ConfigEntry(Base):
    """Core site setting."""

    __tablename__ = "config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class ConfigPlugin(Base):
    """Plugin-scoped setting."""

    __tablename__ = "config_plugins"
    __table_args__ = (UniqueConstraint("plugin", "name", name="uq_config_plugins_plugin_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plugin: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class EnvironmentMatrixValue(Base):
    """Desired value of one setting in one environment."""

    __tablename__ = "cleaner_env_matrix_data"
    __table_args__ = (
        UniqueConstraint("environment", "plugin", "name", name="uq_cleaner_env_matrix_data_env_plugin_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    environment: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    plugin: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
