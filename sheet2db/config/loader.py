from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load an optional YAML config file
- Validate it against the JSON schema shipped next to this module
- Apply defaults for every missing key
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULT_PAGE_SIZE = 1000
DEFAULT_ERROR_LOG_DIR = "./logs"
DEFAULT_OUTPUT_EXTENSION = ".db"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class CsvOptions:
    delimiter: str = ","
    quotechar: str = '"'
    encoding: str = "utf-8-sig"  # BOM 付き UTF-8 も透過的に読む


@dataclass(frozen=True)
class ConvertConfig:
    csv: CsvOptions = field(default_factory=CsvOptions)
    page_size: int = DEFAULT_PAGE_SIZE
    strict_headers: bool = False
    error_log_dir: str = DEFAULT_ERROR_LOG_DIR
    output_extension: str = DEFAULT_OUTPUT_EXTENSION


def default_config() -> ConvertConfig:
    return ConvertConfig()


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails validation (wrong types, unknown keys, ...).
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


def load_config(path: Path) -> ConvertConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    csv_raw = data.get("csv", {})
    defaults = CsvOptions()
    csv_opts = CsvOptions(
        delimiter=csv_raw.get("delimiter", defaults.delimiter),
        quotechar=csv_raw.get("quotechar", defaults.quotechar),
        encoding=csv_raw.get("encoding", defaults.encoding),
    )
    return ConvertConfig(
        csv=csv_opts,
        page_size=data.get("page_size", DEFAULT_PAGE_SIZE),
        strict_headers=data.get("strict_headers", False),
        error_log_dir=data.get("error_log_dir", DEFAULT_ERROR_LOG_DIR),
        output_extension=data.get("output_extension", DEFAULT_OUTPUT_EXTENSION),
    )
