"""Application configuration: settings schema and config.yaml loader"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDPOST_"
BASE_KEYS = ("title", "slug", "date")
MARKER_RE = re.compile(r'^([^\w\s])\1{2,}$')


class Settings(BaseModel):
    app_name:      str = "mdpost"
    db_url:        str = "sqlite:///mdpost.db"
    header_marker: str = Field(default="+++", description="Line that opens and closes front matter")
    required_keys: list[str] = Field(default=list(BASE_KEYS), description="Front matter keys every post must set")
    max_versions:  int = Field(default=10, ge=0, description="Max stored versions per post; 0 disables pruning")
    output_dir:    str = Field(default="dist", description="Directory for exported pages + JSON sidecars")
    output_format: str = Field(default="html", pattern="^(html|md)$", description="html or md")
    site_title:    str = Field(default="", description="Appended to each page <title>")
    language:      str = Field(default="en", description="<html lang> attribute")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator("header_marker")
    @classmethod
    def _marker_is_fence(cls, v: str) -> str:
        """A marker is one punctuation character repeated at least three times."""
        v = v.strip()
        if not MARKER_RE.match(v):
            raise ValueError(f"header_marker must repeat one punctuation character 3+ times, got {v!r}")
        return v

    @field_validator("required_keys", mode="before")
    @classmethod
    def _split_keys(cls, v: Any) -> Any:
        """Accept a comma-separated string (env vars) as well as a list."""
        if isinstance(v, str):
            return [k.strip() for k in v.split(",") if k.strip()]
        return v

    @field_validator("required_keys")
    @classmethod
    def _keep_base_keys(cls, v: list[str]) -> list[str]:
        """title, slug and date are always required; configured keys are checked first."""
        return list(dict.fromkeys([*v, *BASE_KEYS]))

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


def _file_values(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping")
    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", path, ", ".join(map(str, unknown)))
    return data


def _env_values() -> dict[str, str]:
    return {
        name: val for name in Settings.model_fields
        if (val := os.getenv(f"{ENV_PREFIX}{name.upper()}"))
    }


def load_config(overrides: dict[str, Any] = None, path: Union[str, Path] = None) -> Settings:
    """Layer config.yaml (or MDPOST_CONFIG), MDPOST_<FIELD> env vars, then non-None CLI overrides."""
    path = Path(path or os.getenv(f"{ENV_PREFIX}CONFIG") or CONFIG_FILE)
    data = _file_values(path)
    data.update(_env_values())
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return Settings(**data)
