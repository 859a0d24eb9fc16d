"""Per-project configuration read from ``.docplsrc``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

log = structlog.get_logger("docpls.config")

CONFIG_FILENAME = ".docplsrc"

OutputFormat = Literal["markdown", "json"]


class DocPlsConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    default_output_format: OutputFormat = "markdown"
    verify_documentation_urls: bool = True
    documentation_timeout: float = 5.0

    @field_validator("documentation_timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("documentation_timeout must be positive")
        return v


def load_config(root: Path | str) -> DocPlsConfig:
    """Read ``.docplsrc`` from *root*; defaults when absent or malformed."""
    path = Path(root) / CONFIG_FILENAME
    if not path.is_file():
        return DocPlsConfig()
    try:
        return DocPlsConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as exc:
        log.warning("config.invalid", path=str(path), error=str(exc))
        return DocPlsConfig()


def write_default_config(root: Path | str) -> Path:
    """Create ``.docplsrc`` with default values unless it already exists."""
    path = Path(root) / CONFIG_FILENAME
    if not path.exists():
        path.write_text(DocPlsConfig().model_dump_json(indent=2) + "\n", encoding="utf-8")
        log.info("config.created", path=str(path))
    return path
