from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from sumgen.runtime.dir_lock import DEFAULT_LOCK_NAME
from sumgen.synthesis.artifact import DEFAULT_SUFFIX
from sumgen.synthesis.definition import DEFAULT_DIRECTIVE

DEFAULT_CONFIG_NAME = "sumgen.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def generate_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("generate", {})
    return section if isinstance(section, dict) else {}


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_text(value: TomlValue, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


@dataclass(frozen=True)
class GenerateSettings:
    directive: str = DEFAULT_DIRECTIVE
    suffix: str = DEFAULT_SUFFIX
    catalog: Path | None = None
    strict_directives: bool = False
    lock_name: str = DEFAULT_LOCK_NAME


def settings_from_table(section: TomlTable, *, root: Path) -> GenerateSettings:
    catalog_value = section.get("catalog")
    catalog: Path | None = None
    if isinstance(catalog_value, (str, Path)) and str(catalog_value).strip():
        catalog = Path(str(catalog_value).strip())
        if not catalog.is_absolute():
            catalog = root / catalog
    return GenerateSettings(
        directive=_as_text(section.get("directive"), DEFAULT_DIRECTIVE),
        suffix=_as_text(section.get("suffix"), DEFAULT_SUFFIX),
        catalog=catalog,
        strict_directives=_as_bool(section.get("strict_directives")),
        lock_name=_as_text(section.get("lock_name"), DEFAULT_LOCK_NAME),
    )
