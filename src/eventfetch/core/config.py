"""Configuration models using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    structured: bool = True


class FetchConfig(BaseSettings):
    """Event bus and request/response configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTFETCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_timeout: float = Field(default=5.0, gt=0)  # seconds
    default_priority: int = 50
    falsy_is_no_answer: bool = True
    request_id_prefix: str = "o-"
    self_id_prefix: str = "u-"
    logs: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> FetchConfig:
        """Load configuration from YAML file."""
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open() as f:
            data = yaml.safe_load(f)

        return cls(**data) if data else cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FetchConfig:
        """Create configuration from dictionary."""
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()
