# === FILE: site_mirror/config.py ===
"""
Loading and validation of the SiteMirror crawl configuration.
Pydantic describes the schema and checks the data before the crawl starts.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from site_mirror.crawler.models import Address, SeedError
from site_mirror.crawler.normalizer import parse_seed
from site_mirror.storage import DEFAULT_ROOT

__all__ = ["CrawlConfig", "load_config", "FALLBACK_TIMEOUT"]

# Safety ceiling when neither a timeout nor a page limit stops the crawl.
FALLBACK_TIMEOUT = 3600.0


class CrawlConfig(BaseModel):
    """Configuration of a single crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field(..., min_length=1, description="Seed URL; its host is the crawl target.")
    timeout: Optional[int] = Field(None, gt=0, description="Lifetime of the crawl in seconds.")
    page_limit: Optional[int] = Field(None, ge=1, description="Number of pages to save before stopping.")
    workers: int = Field(2, ge=1, description="Number of worker threads.")
    output_dir: Path = Field(DEFAULT_ROOT, description="Root directory for saved pages.")
    request_timeout: Optional[float] = Field(30.0, gt=0, description="Per-request timeout (seconds).")
    retry_times: int = Field(0, ge=0, description="Retries after a network failure.")
    user_agent: str = Field("SiteMirrorBot/1.0", min_length=1, description="User-Agent header.")
    fallback_timeout: float = Field(FALLBACK_TIMEOUT, gt=0, description="Ceiling used when no timeout is set.")

    @field_validator("host", mode="before")
    def _strip_host(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("host")
    def _check_seed(cls, v: str) -> str:
        try:
            parse_seed(v)
        except SeedError as exc:
            raise ValueError(str(exc)) from exc
        return v

    @model_validator(mode="after")
    def _check_stop_condition(self) -> CrawlConfig:
        if self.timeout is None and self.page_limit is None:
            raise ValueError("-timeout or -pages needs to be set")
        return self

    @property
    def seed(self) -> Address:
        return parse_seed(self.host)

    @property
    def deadline(self) -> float:
        """Seconds the crawl may run before it is stopped."""
        return float(self.timeout) if self.timeout is not None else self.fallback_timeout


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> CrawlConfig:
    """
    Build a validated CrawlConfig from an optional YAML/JSON file.

    *overrides* (typically CLI flags) win over file values; None values are
    ignored so unset flags keep the file's setting. A missing file raises
    FileNotFoundError, invalid content ValueError/TypeError/ValidationError.
    """
    data: dict[str, Any] = {}
    if path is not None:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

        suffix = path_obj.suffix.lower()
        if suffix in (".yaml", ".yml"):
            data = _read_yaml(path_obj)
        elif suffix == ".json":
            data = _read_json(path_obj)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    return CrawlConfig(**data)
