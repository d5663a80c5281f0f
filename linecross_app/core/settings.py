from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from linecross_app.core.paths import default_reference_path, settings_path

DEFAULT_PORT = 8092
DEFAULT_AUTH_TOKEN = "Authorization"


class ServiceSettings(BaseModel):
    """
    Fixed service configuration.

    Defaults reproduce the stock deployment: every interface on port 8092,
    the packaged sample reference set and the literal placeholder token.
    """

    host: str = Field("0.0.0.0", description="Interface to bind.")
    port: int = Field(DEFAULT_PORT, ge=0, le=65535, description="TCP port; 0 picks a free port.")
    reference_path: Path = Field(default_factory=default_reference_path, description="Scattered-lines JSON document.")
    auth_token: str = Field(DEFAULT_AUTH_TOKEN, description="Expected value of the Authorization header.")


def load_settings() -> Dict[str, Any]:
    p = settings_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def service_settings(overrides: Optional[Dict[str, Any]] = None) -> ServiceSettings:
    raw = load_settings()
    for k, v in (overrides or {}).items():
        if v is not None:
            raw[k] = v
    try:
        return ServiceSettings.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid service settings: {e}") from e
