from __future__ import annotations

from pathlib import Path

from sumgen.config import (
    GenerateSettings,
    generate_defaults,
    load_config,
    merge_payload,
    settings_from_table,
)


def test_load_config_missing_or_invalid_file_is_empty(tmp_path: Path) -> None:
    assert load_config(root=tmp_path) == {}
    bad = tmp_path / "sumgen.toml"
    bad.write_text("[generate\n", encoding="utf-8")
    assert load_config(root=tmp_path) == {}


def test_generate_defaults_reads_section(tmp_path: Path) -> None:
    (tmp_path / "sumgen.toml").write_text(
        '[generate]\ndirective = "+sum:"\nstrict_directives = true\n',
        encoding="utf-8",
    )
    assert generate_defaults(root=tmp_path) == {"directive": "+sum:", "strict_directives": True}


def test_generate_defaults_honors_explicit_path(tmp_path: Path) -> None:
    path = tmp_path / "custom.toml"
    path.write_text('[generate]\nsuffix = "_gen.go"\n', encoding="utf-8")
    assert generate_defaults(root=tmp_path, config_path=path) == {"suffix": "_gen.go"}


def test_merge_payload_skips_unset_values() -> None:
    merged = merge_payload(
        {"catalog": None, "strict_directives": False},
        {"catalog": "types.yaml", "strict_directives": True},
    )
    assert merged == {"catalog": "types.yaml", "strict_directives": False}


def test_settings_from_table_applies_defaults(tmp_path: Path) -> None:
    assert settings_from_table({}, root=tmp_path) == GenerateSettings()
    settings = settings_from_table(
        {
            "catalog": "types.yaml",
            "strict_directives": "yes",
            "lock_name": ".lock",
            "directive": "  ",
        },
        root=tmp_path,
    )
    assert settings.catalog == tmp_path / "types.yaml"
    assert settings.strict_directives
    assert settings.lock_name == ".lock"
    assert settings.directive == "sumgen:"
