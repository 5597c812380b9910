"""Tests for aumai_cnab CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from aumai_cnab.cli import main
from aumai_cnab.codec import decode, encode


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_bundle(tmp_path: Path, document: dict[str, Any], name: str = "bundle.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Version / logging
# ---------------------------------------------------------------------------


class TestGroupOptions:
    def test_version_exits_zero(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_log_level_accepted(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["--log-level", "debug", "validate", "--bundle", str(bundle_file)]
        )
        assert result.exit_code == 0, result.output

    def test_bad_log_level_rejected(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["--log-level", "LOUD", "validate", "--bundle", str(bundle_file)]
        )
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# validate command
# ---------------------------------------------------------------------------


class TestValidateCommand:
    def test_valid_bundle(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["validate", "--bundle", str(bundle_file)])
        assert result.exit_code == 0, result.output
        assert "Bundle helloworld 0.1.2 is valid." in result.output

    def test_reserved_version(self, tmp_path: Path, bundle_document: dict[str, Any]) -> None:
        bundle_document["version"] = "latest"
        path = _write_bundle(tmp_path, bundle_document)
        runner = CliRunner()
        result = runner.invoke(main, ["validate", "--bundle", str(path)])
        assert result.exit_code == 1
        assert "'latest' is not a valid bundle version" in result.output

    def test_missing_tag(self, tmp_path: Path, bundle_document: dict[str, Any]) -> None:
        bundle_document["invocationImages"][0]["image"] = "example/helloworld"
        path = _write_bundle(tmp_path, bundle_document)
        runner = CliRunner()
        result = runner.invoke(main, ["validate", "--bundle", str(path)])
        assert result.exit_code == 1
        assert "tag is required" in result.output

    def test_malformed_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, ["validate", "--bundle", str(path)])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["validate", "--bundle", str(tmp_path / "nope.json")])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# values command
# ---------------------------------------------------------------------------


class TestValuesCommand:
    def test_set_values(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "values",
                "--bundle", str(bundle_file),
                "--set", "token=abc",
                "--set", "port=9000",
                "--set", "debug=true",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "port": 9000,
            "greeting": "hello",
            "debug": True,
            "token": "abc",
        }

    def test_values_file_with_set_override(self, tmp_path: Path, bundle_file: Path) -> None:
        values = tmp_path / "values.json"
        values.write_text(json.dumps({"token": "from-file", "greeting": "hi"}), encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "values",
                "--bundle", str(bundle_file),
                "--values-file", str(values),
                "--set", "token=from-flag",
            ],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["token"] == "from-flag"
        assert data["greeting"] == "hi"

    def test_undeclared_parameter_ignored(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["values", "--bundle", str(bundle_file), "--set", "token=x", "--set", "other=1"],
        )
        assert result.exit_code == 0, result.output
        assert "other" not in json.loads(result.output)

    def test_missing_required(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["values", "--bundle", str(bundle_file)])
        assert result.exit_code == 1
        assert "'token' is required" in result.output

    def test_unparseable_set_value(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["values", "--bundle", str(bundle_file), "--set", "token=x", "--set", "port=eighty"],
        )
        assert result.exit_code == 1
        assert "as value of port" in result.output

    def test_out_of_range_value(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["values", "--bundle", str(bundle_file), "--set", "token=x", "--set", "port=0"],
        )
        assert result.exit_code == 1
        assert "minimum value" in result.output

    def test_bad_assignment(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["values", "--bundle", str(bundle_file), "--set", "token"])
        assert result.exit_code == 1
        assert "NAME=VALUE" in result.output

    @pytest.mark.parametrize("content", ["[1, 2]", "{oops"])
    def test_bad_values_file(self, tmp_path: Path, bundle_file: Path, content: str) -> None:
        values = tmp_path / "values.json"
        values.write_text(content, encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(
            main, ["values", "--bundle", str(bundle_file), "--values-file", str(values)]
        )
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# fmt command
# ---------------------------------------------------------------------------


class TestFmtCommand:
    def test_fmt_to_stdout(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["fmt", "--bundle", str(bundle_file)])
        assert result.exit_code == 0, result.output
        canonical = encode(decode(bundle_file.read_bytes())).decode("utf-8")
        assert result.output == canonical + "\n"

    def test_fmt_to_file(self, tmp_path: Path, bundle_file: Path) -> None:
        out = tmp_path / "canonical.json"
        runner = CliRunner()
        result = runner.invoke(
            main, ["fmt", "--bundle", str(bundle_file), "--output", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == encode(decode(bundle_file.read_bytes()))


# ---------------------------------------------------------------------------
# inspect command
# ---------------------------------------------------------------------------


class TestInspectCommand:
    def test_inspect_summary(self, bundle_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", "--bundle", str(bundle_file)])
        assert result.exit_code == 0, result.output
        assert "helloworld" in result.output
        assert "example/helloworld-cnab:0.1.2" in result.output
        assert "Parameters (4)" in result.output
        assert "required" in result.output
        assert "$PASSWORD" in result.output
        assert "/root/.kube/config" in result.output
        assert "stateless" in result.output
