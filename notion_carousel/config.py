"""Runtime configuration loader."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .models.config import Config


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Missing {label}: {path}")


def load_config(
    project_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Config:
    """Load configuration from canonical defaults and the environment.

    ``NOTION_TOKEN`` may be absent; commands that talk to Notion check it
    themselves. ``CAROUSEL_STYLE_PATH`` must point at an existing file.
    """
    env = os.environ if environ is None else environ
    root = project_root or Path(__file__).resolve().parents[1]

    runs_dir = Path(env["CAROUSEL_RUNS_DIR"]) if env.get("CAROUSEL_RUNS_DIR") else root / "runs"

    style_path: Optional[Path] = None
    if env.get("CAROUSEL_STYLE_PATH"):
        style_path = Path(env["CAROUSEL_STYLE_PATH"])
        _require_file(style_path, "style_config")

    values: Dict[str, Any] = {
        "project_root": str(root),
        "runs_dir": str(runs_dir),
        "notion_token": env.get("NOTION_TOKEN") or None,
        "style_path": str(style_path) if style_path else None,
    }
    if env.get("NOTION_API_BASE"):
        values["notion_api_base"] = env["NOTION_API_BASE"]
    if env.get("NOTION_TIMEOUT"):
        values["request_timeout"] = float(env["NOTION_TIMEOUT"])
    return Config(**values)


def load_style_file(path: Path) -> Dict[str, Any]:
    """Read a JSON style mapping (snake_case or camelCase keys)."""
    _require_file(path, "style_config")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Style config must be a JSON object: {path}")
    return data
