"""
kategg - Runner configuration

Limits are Pydantic-validated and loaded from, in increasing priority:
1. field defaults
2. environment variables (``KATEGG_ITER_LIMIT``, ``KATEGG_NODE_LIMIT``, ...)
3. an optional YAML file
4. explicit overrides (e.g. command-line flags)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunnerConfig(BaseSettings):
    # None disables a limit; at least one must stay finite
    iter_limit: Optional[int] = Field(default=30, ge=0)
    node_limit: Optional[int] = Field(default=10_000, ge=0)
    time_limit: Optional[float] = Field(default=5.0, ge=0)  # seconds, wall clock
    explanations_enabled: bool = False

    model_config = SettingsConfigDict(env_prefix="KATEGG_", extra="forbid")

    @model_validator(mode="after")
    def _require_a_limit(self) -> RunnerConfig:
        if self.iter_limit is None and self.node_limit is None and self.time_limit is None:
            raise ValueError("at least one of iter_limit, node_limit, time_limit must be set")
        return self


def load_config(config_path: str | Path | None = None, **overrides: Any) -> RunnerConfig:
    """
    Load runner limits from a YAML file, then apply keyword overrides.

    Overrides whose value is None are ignored so that unset CLI flags do not
    clobber file or environment values.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a mapping of runner options")

    raw.update({k: v for k, v in overrides.items() if v is not None})
    return RunnerConfig(**raw)
