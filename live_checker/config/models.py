"""Pydantic models describing checker configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class SchedulingMode(str, Enum):
    """How the batch scheduler keeps probes in flight."""

    CHUNKED = "chunked"
    POOL = "pool"


class CheckerConfig(BaseModel):
    """Settings shared by every check run."""

    concurrency_bound: int = Field(default=10, gt=0)
    remote_endpoint_base: str = "https://graph.facebook.com"
    picture_type: str = "normal"
    dead_marker: str = "static"
    request_timeout: float = Field(default=15.0, gt=0)
    max_ids: int = Field(default=10000, gt=0)
    scheduling: SchedulingMode = Field(default=SchedulingMode.CHUNKED)
    report_errors: bool = False
    user_agent: str | None = DEFAULT_USER_AGENT
    proxy: str | None = None
    enable_progress_bar: bool = True
    outputs_dir: Path = Field(default=Path("data/outputs"))

    @field_validator("remote_endpoint_base", mode="before")
    @classmethod
    def _normalise_endpoint(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text.startswith(("http://", "https://")):
            raise ValueError("remote_endpoint_base must be an http(s) URL")
        return text.rstrip("/")

    @field_validator("dead_marker", "picture_type")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value cannot be blank")
        return value.strip()

    @field_validator("user_agent", "proxy", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return str(value).strip() or None

    @field_validator("outputs_dir", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="after")
    def _validate_proxy(self) -> "CheckerConfig":
        if self.proxy and "://" not in self.proxy:
            raise ValueError("proxy must include a scheme, e.g. http://127.0.0.1:7890")
        return self

    def with_overrides(self, **overrides: Any) -> "CheckerConfig":
        """Return a validated copy with non-``None`` overrides applied."""

        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        payload = self.model_dump()
        payload.update(updates)
        return CheckerConfig.model_validate(payload)

    def resolved_outputs_dir(self, base_dir: Path) -> Path:
        if not self.outputs_dir.is_absolute():
            return (base_dir / self.outputs_dir).resolve()
        return self.outputs_dir


__all__ = ["CheckerConfig", "DEFAULT_USER_AGENT", "SchedulingMode"]
