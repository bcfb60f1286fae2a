from __future__ import annotations

from pydantic import BaseModel, Field


class ConfigItem(BaseModel):
    plugin: str
    name: str
    value: str | None = None

    @property
    def key(self) -> str:
        return f"{self.plugin}|{self.name}"


class MatrixRow(BaseModel):
    plugin: str
    name: str
    current: str | None = None
    values: dict[str, str | None] = Field(default_factory=dict)


class EnvironmentMatrix(BaseModel):
    environments: list[str]
    rows: list[MatrixRow]
