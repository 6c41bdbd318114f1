from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.options import ReadOptions, WriteOptions

"""YAML configuration loader.

Responsibilities:
- Locate the config file (explicit path, TABLECODEC_CONFIG, or the default)
- Load YAML and validate it against the bundled JSON schema
- Apply library defaults for every omitted key
- Return frozen dataclasses that carry ready-made ReadOptions/WriteOptions
"""

__all__ = [
    "ConfigError",
    "LineLayout",
    "JobConfig",
    "AppConfig",
    "load_config",
    "resolve_config_path",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/tablecodec.yml")
CONFIG_ENV_VAR = "TABLECODEC_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class LineLayout:
    """Where the header and the first data line sit (1-based)."""
    header_line: int = 1
    start_line: int = 3


@dataclass(frozen=True)
class JobConfig:
    op: str  # read/write/upsert/find_update/clear
    table: str
    input: str | None = None  # JSON file with a list of records
    output: str | None = None  # read: JSON (or .csv) destination
    match: str | None = None
    fields: list[str] = field(default_factory=list)
    mode: str | None = None  # overrides write.mode
    pivot: bool | None = None  # overrides read/write pivot
    header_line: int | None = None
    start_line: int | None = None


@dataclass(frozen=True)
class AppConfig:
    workbook: str
    read: ReadOptions
    read_layout: LineLayout
    write: WriteOptions
    write_layout: LineLayout
    jobs: list[JobConfig] = field(default_factory=list)
    logs_dir: str = "./logs"
    log_level: str = "INFO"


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit path first, then $TABLECODEC_CONFIG, then config/tablecodec.yml."""
    if path is not None:
        return Path(path)
    env = os.getenv(CONFIG_ENV_VAR)
    return Path(env) if env else DEFAULT_CONFIG_PATH


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _layout(raw: dict[str, Any]) -> LineLayout:
    return LineLayout(
        header_line=raw.get("header_line", 1),
        start_line=raw.get("start_line", 3),
    )


def load_config(path: Path | str | None = None) -> AppConfig:
    path = resolve_config_path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    read_raw = data.get("read") or {}
    write_raw = data.get("write") or {}
    read = ReadOptions(
        last_column=read_raw.get("last_column"),
        mute=read_raw.get("mute", True),
        use_display_dates=read_raw.get("use_display_dates", True),
        pivot=read_raw.get("pivot", False),
        strict_headers=read_raw.get("strict_headers", False),
    )
    write = WriteOptions(
        mode=write_raw.get("mode", "overwrite"),
        pivot=write_raw.get("pivot", False),
        preserve_formulas=write_raw.get("preserve_formulas", True),
        strict_headers=write_raw.get("strict_headers", False),
    )
    jobs = [
        JobConfig(
            op=j["op"],
            table=j["table"],
            input=j.get("input"),
            output=j.get("output"),
            match=j.get("match"),
            fields=list(j.get("fields", [])),
            mode=j.get("mode"),
            pivot=j.get("pivot"),
            header_line=j.get("header_line"),
            start_line=j.get("start_line"),
        )
        for j in data.get("jobs") or []
    ]
    return AppConfig(
        workbook=data["workbook"],
        read=read,
        read_layout=_layout(read_raw),
        write=write,
        write_layout=_layout(write_raw),
        jobs=jobs,
        logs_dir=data.get("logs_dir", "./logs"),
        log_level=data.get("log_level", "INFO"),
    )
