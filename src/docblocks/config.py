"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "DOCBLOCKS_"


class Settings(BaseModel):
    app_name:       str   = "docblocks"
    db_url:         str   = "sqlite:///docblocks.db"
    db_timeout:     float = Field(default=5.0, gt=0, description="Seconds to wait on a locked database")
    min_block_size: float = Field(default=1.0, gt=0, description="Smallest allowed block width/height")
    default_block_content: str = Field(default="New Text Block", description="Placeholder for new blocks")
    default_block_x:      float = 100.0
    default_block_y:      float = 100.0
    default_block_width:  float = Field(default=200.0, gt=0)
    default_block_height: float = Field(default=100.0, gt=0)
    max_versions:   int   = Field(default=10, ge=0, description="Max stored versions per doc; 0 disables pruning")
    unique_signers: bool  = Field(default=True, description="Reject a second signature by the same signer name")
    log_level:      str   = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then DOCBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
