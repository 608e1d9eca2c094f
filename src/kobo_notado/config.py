"""Configuration helpers for the highlight synchroniser."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .uploaders.notado import DEFAULT_TIMEOUT, NOTADO_ENDPOINT


@dataclass
class SyncConfig:
    """Holds configuration for syncing highlights."""

    kobo_path: Optional[Path] = None
    notado_token: str = ""
    upload_store_highlights: bool = False
    endpoint: str = NOTADO_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    dry_run: bool = False

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "SyncConfig":
        kwargs: Dict[str, Any] = {}
        if "kobo_path" in data and data["kobo_path"]:
            kwargs["kobo_path"] = Path(data["kobo_path"])
        if "notado_token" in data and data["notado_token"]:
            kwargs["notado_token"] = str(data["notado_token"])
        if "upload_store_highlights" in data:
            kwargs["upload_store_highlights"] = bool(data["upload_store_highlights"])
        if "endpoint" in data and data["endpoint"]:
            kwargs["endpoint"] = str(data["endpoint"])
        if "timeout" in data and data["timeout"]:
            kwargs["timeout"] = float(data["timeout"])
        if "dry_run" in data:
            kwargs["dry_run"] = bool(data["dry_run"])
        return cls(**kwargs)


def load_config(path: Optional[Path]) -> Dict[str, Any]:
    """Load a JSON configuration file if provided."""

    if path is None:
        return {}
    with path.expanduser().resolve().open("r", encoding="utf-8") as handle:
        return json.load(handle)
