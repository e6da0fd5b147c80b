"""Unit tests for CLI commands and argument parsing."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from cli import cli
from core.errors import DocumentIOError
from utils.hash import hash_from_name
from utils.text import extract_abbrlink


@pytest.fixture
def runner():
    """Create Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def twins(tmp_path):
    """Two notes sharing a file name."""
    root = tmp_path / "twins"
    for folder, day in (("a", "2020-01-01"), ("b", "2021-01-01")):
        (root / folder).mkdir(parents=True)
        (root / folder / "note.md").write_text(f"---\ndate: {day}\n---\n", encoding="utf-8")
    return root


def _abbrlink(path):
    return extract_abbrlink(path.read_text(encoding="utf-8"), 8)


def test_cli_group_exists(runner):
    """Test CLI group is accessible."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Abbrlink" in result.output
    for command in ("generate", "assign", "check", "init-config"):
        assert command in result.output


def test_generate_requires_root_dir(runner):
    """Test that generate requires --root-dir."""
    result = runner.invoke(cli, ["generate"])

    assert result.exit_code != 0
    assert "root-dir" in result.output.lower()


def test_generate(runner, vault):
    """Test generating abbrlinks for a collection."""
    result = runner.invoke(cli, ["generate", "--root-dir", str(vault)])

    assert result.exit_code == 0, result.output
    assert "Written: 3" in result.output
    assert _abbrlink(vault / "posts" / "hello-world.md") == hash_from_name("hello-world", 8)


def test_generate_dry_run(runner, vault):
    """Test --dry-run leaves files untouched."""
    result = runner.invoke(cli, ["generate", "--root-dir", str(vault), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Would write: 3" in result.output
    assert _abbrlink(vault / "posts" / "hello-world.md") is None


def test_generate_invalid_hash_length(runner, vault):
    """Test invalid settings exit with status 2."""
    result = runner.invoke(cli, ["generate", "--root-dir", str(vault), "--hash-length", "2"])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_generate_hash_length_and_encoding(runner, vault):
    """Test length and encoding options."""
    result = runner.invoke(
        cli,
        ["generate", "--root-dir", str(vault), "--hash-length", "12", "--encoding", "decimal"],
    )

    assert result.exit_code == 0, result.output
    text = (vault / "no-front-matter.md").read_text(encoding="utf-8")
    assert extract_abbrlink(text, 12, "decimal") == hash_from_name("no-front-matter", 12, "decimal")


def test_generate_check_collisions(runner, twins):
    """Test --check-collisions separates same-named notes."""
    result = runner.invoke(cli, ["generate", "--root-dir", str(twins), "--check-collisions"])

    assert result.exit_code == 0, result.output
    assert "Collision check: committed after 1 round(s)" in result.output
    assert _abbrlink(twins / "a" / "note.md") != _abbrlink(twins / "b" / "note.md")


def test_generate_report(runner, vault, tmp_path):
    """Test --report writes one record per document."""
    report = tmp_path / "report.jsonl"

    result = runner.invoke(cli, ["generate", "--root-dir", str(vault), "--report", str(report)])

    assert result.exit_code == 0, result.output
    records = [json.loads(line) for line in report.read_text(encoding="utf-8").splitlines()]
    assert len(records) == 3
    assert {r["status"] for r in records} == {"written"}


def test_generate_save_config(runner, vault):
    """Test --save-config persists the effective settings."""
    result = runner.invoke(
        cli, ["generate", "--root-dir", str(vault), "--hash-length", "12", "--save-config"]
    )

    assert result.exit_code == 0, result.output
    saved = yaml.safe_load((vault / ".abbrlink.yaml").read_text(encoding="utf-8"))
    assert saved["hash_length"] == 12


def test_generate_reads_config_file(runner, vault, tmp_path):
    """Test settings are read from --config-file."""
    settings = tmp_path / "settings.yaml"
    settings.write_text("hash_length: 16\n", encoding="utf-8")

    result = runner.invoke(
        cli, ["generate", "--root-dir", str(vault), "--config-file", str(settings)]
    )

    assert result.exit_code == 0, result.output
    text = (vault / "no-front-matter.md").read_text(encoding="utf-8")
    assert extract_abbrlink(text, 16) == hash_from_name("no-front-matter", 16)


def test_generate_write_failure_exit_code(runner, vault):
    """Test a failed write exits with status 1 after processing the rest."""
    error = DocumentIOError(vault / "x.md", "write", OSError("disk full"))

    with patch("core.inventory.VaultInventory.write_abbrlink", side_effect=error):
        result = runner.invoke(cli, ["generate", "--root-dir", str(vault)])

    assert result.exit_code == 1
    assert "Failed: 3" in result.output


def test_generate_fail_fast_exit_code(runner, vault):
    """Test --fail-fast aborts with status 1."""
    error = DocumentIOError(vault / "x.md", "write", OSError("disk full"))

    with patch("core.inventory.VaultInventory.write_abbrlink", side_effect=error):
        result = runner.invoke(cli, ["generate", "--root-dir", str(vault), "--fail-fast"])

    assert result.exit_code == 1
    assert "Abbrlink run complete" not in result.output


def test_assign(runner, vault):
    """Test assigning an abbrlink to a single document."""
    path = vault / "fresh.md"
    path.write_text("# Fresh\n", encoding="utf-8")

    result = runner.invoke(cli, ["assign", str(path), "--root-dir", str(vault)])

    assert result.exit_code == 0, result.output
    abbrlink = _abbrlink(path)
    assert abbrlink is not None
    assert abbrlink in result.output


def test_assign_config_mode(runner, vault):
    """Test --use-config-mode hashes the document name."""
    path = vault / "fresh.md"
    path.write_text("# Fresh\n", encoding="utf-8")

    result = runner.invoke(
        cli, ["assign", str(path), "--root-dir", str(vault), "--use-config-mode"]
    )

    assert result.exit_code == 0, result.output
    assert hash_from_name("fresh", 8) in result.output


def test_check_clean(runner, vault):
    """Test check on a collection without duplicates."""
    result = runner.invoke(cli, ["check", "--root-dir", str(vault)])

    assert result.exit_code == 0, result.output
    assert "No duplicate abbrlinks found" in result.output


def test_check_reports_duplicates(runner, twins):
    """Test check lists duplicate abbrlinks and exits with status 1."""
    runner.invoke(cli, ["generate", "--root-dir", str(twins)])

    result = runner.invoke(cli, ["check", "--root-dir", str(twins)])

    assert result.exit_code == 1
    assert hash_from_name("note", 8) in result.output
    assert str(Path("a") / "note.md") in result.output
    assert str(Path("b") / "note.md") in result.output


def test_init_config(runner, tmp_path):
    """Test writing a default settings file."""
    path = tmp_path / "settings.yaml"

    result = runner.invoke(cli, ["init-config", str(path)])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["hash_length"] == 8


def test_init_config_refuses_overwrite(runner, tmp_path):
    """Test an existing file is kept unless --force is given."""
    path = tmp_path / "settings.yaml"
    path.write_text("hash_length: 12\n", encoding="utf-8")

    result = runner.invoke(cli, ["init-config", str(path)])
    assert result.exit_code == 1
    assert path.read_text(encoding="utf-8") == "hash_length: 12\n"

    result = runner.invoke(cli, ["init-config", str(path), "--force"])
    assert result.exit_code == 0
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["hash_length"] == 8
