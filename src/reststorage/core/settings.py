"""Adapter settings loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from reststorage.core.errors import ConfigurationError
from reststorage.utils.env import get_env, get_float_env


class RestStorageSettings(BaseModel):
    """Endpoint, credential and polling policy for one adapter instance."""

    endpoint: str = ""
    token: str = ""
    request_timeout: float = Field(default=30.0, gt=0)
    lock_poll_initial: float = Field(default=0.05, ge=0)
    lock_poll_max: float = Field(default=1.0, ge=0)
    lock_poll_multiplier: float = Field(default=2.0, ge=1)

    @model_validator(mode="after")
    def _check_backoff(self) -> "RestStorageSettings":
        if self.lock_poll_max < self.lock_poll_initial:
            raise ValueError("lock_poll_max must not be smaller than lock_poll_initial")
        return self

    def validate_credentials(self) -> None:
        if not self.endpoint.strip():
            raise ConfigurationError("endpoint must be specified")
        if not self.token.strip():
            raise ConfigurationError("token must be specified")

    def url_for(self, operation: str) -> str:
        return self.endpoint + operation

    @classmethod
    def build(cls, **values: Any) -> "RestStorageSettings":
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid storage settings: {exc}") from exc

    @classmethod
    def from_file(cls, path: Path) -> "RestStorageSettings":
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read storage settings from {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Storage settings in {path} must be a mapping")
        # allow the settings to live under a "storage" section of a larger file
        if isinstance(data.get("storage"), dict):
            data = data["storage"]
        return cls.build(**data)

    @classmethod
    def from_env(cls, prefix: str = "REST_STORAGE_") -> "RestStorageSettings":
        values: Dict[str, Any] = {
            "endpoint": get_env(f"{prefix}ENDPOINT", ""),
            "token": get_env(f"{prefix}TOKEN", ""),
        }
        for name in ("request_timeout", "lock_poll_initial", "lock_poll_max", "lock_poll_multiplier"):
            override: Optional[float] = get_float_env(f"{prefix}{name.upper()}")
            if override is not None:
                values[name] = override
        return cls.build(**values)
