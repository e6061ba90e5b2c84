import json
from pathlib import Path

import pytest

from fontarchive.config import (
    CLONE_DIR_NAME,
    EXTRACT_DIR_NAME,
    ArchiverConfig,
    load_config,
    load_config_values,
)


def _write_config(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults_derive_from_work_dir(tmp_path):
    config = ArchiverConfig(work_dir=tmp_path)

    assert config.fonts_base_dir == Path("/usr/share/fonts")
    assert config.extract_dir == tmp_path / EXTRACT_DIR_NAME
    assert config.clone_dir == tmp_path / CLONE_DIR_NAME
    assert config.metadata_backend == "auto"
    assert config.update_cache
    assert not config.dry_run


def test_rejects_unknown_backend(tmp_path):
    with pytest.raises(ValueError, match="metadata_backend"):
        ArchiverConfig(work_dir=tmp_path, metadata_backend="fontforge")


def test_load_config_values(tmp_path):
    path = _write_config(
        tmp_path / "config.json",
        {
            "fonts_base_dir": "~/fonts",
            "update_cache": False,
            "metadata_backend": "none",
        },
    )

    values = load_config_values(path)

    assert values["fonts_base_dir"] == Path("~/fonts").expanduser()
    assert values["update_cache"] is False
    assert values["metadata_backend"] == "none"


@pytest.mark.parametrize(
    "data, message",
    [
        (["not", "an", "object"], "JSON object"),
        ({"colour": "blue"}, "Unknown config keys"),
        ({"dry_run": "yes"}, "true or false"),
        ({"work_dir": 42}, "string path"),
        ({"metadata_backend": 3}, "must be a string"),
    ],
)
def test_load_config_values_rejects(tmp_path, data, message):
    path = _write_config(tmp_path / "config.json", data)

    with pytest.raises(ValueError, match=message):
        load_config_values(path)


def test_load_config_values_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON"):
        load_config_values(path)


def test_overrides_win_over_file(tmp_path):
    path = _write_config(
        tmp_path / "config.json",
        {"fonts_base_dir": str(tmp_path / "from-file"), "verbose": True},
    )

    config = load_config(
        path,
        overrides={
            "fonts_base_dir": tmp_path / "from-cli",
            "verbose": None,
            "work_dir": tmp_path,
        },
    )

    assert config.fonts_base_dir == tmp_path / "from-cli"
    assert config.verbose is True


def test_default_config_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "fontarchive.config.DEFAULT_CONFIG_FILE", tmp_path / "missing.json"
    )

    config = load_config(overrides={"work_dir": tmp_path})

    assert config.fonts_base_dir == Path("/usr/share/fonts")


def test_default_config_file_is_read(tmp_path, monkeypatch):
    default = _write_config(tmp_path / "default.json", {"recursive": True})
    monkeypatch.setattr("fontarchive.config.DEFAULT_CONFIG_FILE", default)

    assert load_config(overrides={"work_dir": tmp_path}).recursive


def test_explicit_config_file_must_exist(tmp_path):
    with pytest.raises(ValueError, match="Config file not found"):
        load_config(tmp_path / "missing.json")
