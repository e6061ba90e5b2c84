import shutil
import zipfile

import pytest
from helpers import build_test_font, write_font_bytes

from fontarchive import cli
from fontarchive.cli import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    build_parser,
    main,
    run_organize,
)
from fontarchive.config import ArchiverConfig
from fontarchive.metadata import FontMetadata


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "fontarchive.config.DEFAULT_CONFIG_FILE", tmp_path / "no-such-config"
    )


def _organize_args(work, base, *extra):
    return [
        "organize",
        str(work),
        "-o",
        str(base),
        "--metadata",
        "none",
        "--no-cache-update",
        *extra,
    ]


def test_parser_defaults_leave_config_values_alone():
    args = build_parser().parse_args(["organize"])
    assert args.dry_run is None
    assert args.update_cache is None
    assert args.output is None

    args = build_parser().parse_args(["organize", "--no-cache-update", "-n"])
    assert args.update_cache is False
    assert args.dry_run is True


def test_download_github_requires_repo():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["download-github"])


def test_no_command_prints_help(capsys):
    assert main([]) == EXIT_OK
    assert "usage:" in capsys.readouterr().out


def test_organize_end_to_end(tmp_path, capsys):
    work = tmp_path / "work"
    base = tmp_path / "fonts"
    write_font_bytes(work / "JetBrainsMono-NerdFont-Bold.ttf", b"jb")
    write_font_bytes(work / "Inter-Regular.otf", b"inter")
    with zipfile.ZipFile(work / "Hack.zip", "w") as zf:
        zf.writestr("ttf/Hack-Regular.ttf", b"hack")

    status = main(_organize_args(work, base))

    assert status == EXIT_OK
    nerd_dir = base / "truetype" / "jetbrainsmonoNF"
    assert (nerd_dir / "JetBrainsMono-NerdFont-Bold.ttf").exists()
    assert (base / "opentype" / "inter" / "Inter-Regular.otf").exists()
    assert (base / "truetype" / "hack" / "Hack-Regular.ttf").read_bytes() == b"hack"
    # the extraction directory is temporary
    assert not (work / ".font_temp_extract").exists()
    out = capsys.readouterr().out
    assert "Organized 3 of 3 font files" in out
    assert "✓ Done." in out


def test_organize_twice_skips_identical(tmp_path, capsys):
    work = tmp_path / "work"
    base = tmp_path / "fonts"
    write_font_bytes(work / "Inter-Regular.otf", b"inter")

    assert main(_organize_args(work, base)) == EXIT_OK
    capsys.readouterr()
    assert main(_organize_args(work, base)) == EXIT_OK

    assert "identical: 1" in capsys.readouterr().out


def test_organize_keep_temp(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    with zipfile.ZipFile(work / "Hack.zip", "w") as zf:
        zf.writestr("Hack-Regular.ttf", b"hack")

    main(_organize_args(work, tmp_path / "fonts", "--keep-temp"))

    assert (work / ".font_temp_extract" / "Hack" / "Hack-Regular.ttf").exists()


def test_organize_dry_run(tmp_path, capsys):
    work = tmp_path / "work"
    base = tmp_path / "fonts"
    write_font_bytes(work / "Inter-Regular.otf", b"inter")

    assert main(_organize_args(work, base, "--dry-run")) == EXIT_OK

    assert not base.exists()
    out = capsys.readouterr().out
    assert "[DRY-RUN] Would copy Inter-Regular.otf" in out
    assert "Would organize 1 of 1 font files" in out


def test_organize_updates_cache_after_placing(tmp_path, monkeypatch):
    work = tmp_path / "work"
    write_font_bytes(work / "Inter-Regular.otf", b"inter")
    calls = []
    monkeypatch.setattr(cli, "update_font_cache", lambda verbose: calls.append(verbose))

    args = ["organize", str(work), "-o", str(tmp_path / "fonts"), "--metadata", "none"]
    assert main(args) == EXIT_OK

    assert calls == [False]


def test_organize_empty_directory(tmp_path, capsys):
    work = tmp_path / "work"
    work.mkdir()

    assert main(_organize_args(work, tmp_path / "fonts")) == EXIT_OK
    assert "No fonts to organize." in capsys.readouterr().out


def test_unwritable_base_dir_aborts(tmp_path, capsys):
    work = tmp_path / "work"
    write_font_bytes(work / "Inter-Regular.otf")
    base = tmp_path / "fonts"
    base.write_text("a file, not a directory")

    assert main(_organize_args(work, base)) == EXIT_FAILURE
    assert "Cannot create fonts base directory" in capsys.readouterr().err


def test_failed_file_sets_exit_status(tmp_path, monkeypatch, capsys):
    work = tmp_path / "work"
    write_font_bytes(work / "Inter-Regular.otf")
    write_font_bytes(work / "Hack-Regular.ttf")

    real_copyfile = shutil.copyfile

    def flaky_copyfile(src, dst, *args, **kwargs):
        if str(src).endswith("Hack-Regular.ttf"):
            raise PermissionError("denied")
        return real_copyfile(src, dst, *args, **kwargs)

    monkeypatch.setattr("fontarchive.organize.shutil.copyfile", flaky_copyfile)

    assert main(_organize_args(work, tmp_path / "fonts")) == EXIT_FAILURE
    captured = capsys.readouterr()
    assert "failed: 1" in captured.out
    assert "Hack-Regular.ttf: Failed to copy" in captured.err


def test_invalid_config_file(tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text('{"colour": "blue"}', encoding="utf-8")

    assert main(["organize", str(tmp_path), "-c", str(config)]) == EXIT_FAILURE
    assert "Unknown config keys" in capsys.readouterr().err


def test_download_github_without_git(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("fontarchive.system.shutil.which", lambda cmd: None)
    monkeypatch.setattr("fontarchive.cli.get_package_manager", lambda: "apt")

    assert main(["download-github", "-r", "tonsky/FiraCode"]) == EXIT_FAILURE
    captured = capsys.readouterr()
    assert "Missing required tools: git" in captured.err
    assert "Required packages: git" in captured.out


def test_inspect(tmp_path, capsys):
    font = build_test_font(
        tmp_path / "HackNerdFont-Regular.ttf",
        family="Hack Nerd Font",
        codepoints=(0x41, 0xE0A0),
    )

    assert main(["inspect", "--metadata", "fonttools", str(font)]) == EXIT_OK

    out = capsys.readouterr().out
    assert "Type:      truetype" in out
    assert "Family:    hackNF" in out
    assert "Nerd Font: yes" in out
    assert "Declared:  Hack Nerd Font" in out


def test_inspect_missing_file(tmp_path, capsys):
    assert main(["inspect", str(tmp_path / "nope.ttf")]) == EXIT_FAILURE
    assert "Not a file" in capsys.readouterr().err


def test_hard_interrupt_prints_partial_summary(tmp_path, capsys):
    work = tmp_path / "work"
    write_font_bytes(work / "Hack-Regular.ttf", b"hack")
    write_font_bytes(work / "Inter-Regular.otf", b"inter")
    config = ArchiverConfig(
        fonts_base_dir=tmp_path / "fonts", work_dir=work, update_cache=False
    )

    def interrupted_query(path):
        if path.name.startswith("Inter"):
            raise KeyboardInterrupt
        return FontMetadata()

    assert run_organize(config, interrupted_query) == EXIT_INTERRUPTED

    out = capsys.readouterr().out
    assert "Organized 1 of 1 font files" in out
    assert "Interrupted: remaining files were not processed." in out
    assert (tmp_path / "fonts" / "truetype" / "hack" / "Hack-Regular.ttf").exists()
