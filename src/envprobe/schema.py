"""Generate JSON Schema for the preflight YAML format."""

from __future__ import annotations

import json
from pathlib import Path

from envprobe.config import PreflightConfig


def generate_json_schema() -> dict:
    schema = PreflightConfig.model_json_schema()
    schema["title"] = "envprobe preflight config"
    return schema


def write_json_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    schema = generate_json_schema()
    path.write_text(json.dumps(schema, indent=2) + "\n")
