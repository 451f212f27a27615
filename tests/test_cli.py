"""Tests for the click entrypoint wiring."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from bcs.cli import cli


def _invoke(corpus_root: Path, *args: str):
    return CliRunner().invoke(cli, ["--data-dir", str(corpus_root), *args])


def test_decode_tier_flags(corpus_root: Path) -> None:
    result = _invoke(corpus_root, "decode", "BCS0102", "-s", "--basename")
    assert result.exit_code == 0, result.output
    assert result.stdout == "02-shebang.summary.md\n"


def test_decode_exit_codes(corpus_root: Path) -> None:
    assert _invoke(corpus_root, "decode", "BCS9999").exit_code == 1
    assert _invoke(corpus_root, "decode", "BCS102").exit_code == 2
    assert _invoke(corpus_root, "decode").exit_code == 2  # missing argument


def test_aliases_match(corpus_root: Path) -> None:
    codes = _invoke(corpus_root, "codes")
    list_codes = _invoke(corpus_root, "list-codes")
    assert codes.exit_code == 0
    assert codes.stdout == list_codes.stdout

    search = _invoke(corpus_root, "search", "-i", "SHEBANG", "-a")
    grep = _invoke(corpus_root, "grep", "-i", "SHEBANG", "-a")
    assert search.exit_code == 0
    assert search.stdout == grep.stdout


def test_data_dir_from_environment(corpus_root: Path) -> None:
    result = CliRunner().invoke(cli, ["sections"], env={"BCS_DATA_DIR": str(corpus_root)})
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("1. Script Structure")


def test_default_tier_from_environment(corpus_root: Path) -> None:
    result = CliRunner().invoke(
        cli,
        ["--data-dir", str(corpus_root), "decode", "BCS0102", "--basename"],
        env={"BCS_DEFAULT_TIER": "complete"},
    )
    assert result.stdout == "02-shebang.complete.md\n"


def test_missing_data_dir(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--data-dir", str(tmp_path / "missing"), "codes"])
    assert result.exit_code == 2


def test_invalid_config_is_reported(corpus_root: Path) -> None:
    (corpus_root / "bcs.toml").write_text('default_tier = "huge"\n', encoding="utf-8")
    result = _invoke(corpus_root, "codes")
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_validate_explain(corpus_root: Path) -> None:
    result = _invoke(corpus_root, "validate", "--explain", "bad-naming")
    assert result.exit_code == 0
    assert "kebab" in result.stdout
