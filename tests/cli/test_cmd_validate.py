"""Tests for the validate and schema CLI commands."""

from __future__ import annotations

import argparse
import json
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest.mock import patch

import pytest

from td_validator.interfaces.cli.main import build_parser, cmd_validate, main

# pylint: disable=redefined-outer-name


def _args(paths, **overrides) -> argparse.Namespace:
    values = {
        "paths": [str(p) for p in paths],
        "offline": True,
        "junit": False,
        "junit_path": None,
        "report_json": None,
        "jsonld_timeout": None,
        "config": None,
        "allow_empty": False,
        "no_progress": True,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def valid_dir(tmp_path: Path, write_document, documents) -> Path:
    root = tmp_path / "valid"
    write_document("MinimalThing.json", documents["minimal_td"], root)
    write_document("lamp.json", documents["lamp_td"], root)
    write_document("lamp.tm.json", documents["valid_tm"], root)
    return root


@pytest.fixture
def mixed_dir(valid_dir: Path, write_document, not_json) -> Path:
    write_document("broken.json", not_json, valid_dir)
    return valid_dir


class TestCmdValidate:
    """Tests for cmd_validate function."""

    def test_all_valid(self, valid_dir, capsys):
        assert cmd_validate(_args([valid_dir])) == 0

        out = capsys.readouterr().out
        assert "MinimalThing.json" in out
        assert "Validated 3 documents: 3 valid (1 with warnings), 0 invalid" in out

    def test_invalid_document_fails(self, mixed_dir, caplog):
        with caplog.at_level("ERROR"):
            assert cmd_validate(_args([mixed_dir])) == 1
        assert "Validation failed for 1 of 4 documents." in caplog.text

    def test_missing_path_alone_fails(self, tmp_path):
        assert cmd_validate(_args([tmp_path / "missing"])) == 1

    def test_empty_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert cmd_validate(_args([empty])) == 1
        assert cmd_validate(_args([empty], allow_empty=True)) == 0

    def test_no_paths(self):
        assert cmd_validate(_args([])) == 2

    def test_junit_report(self, mixed_dir, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert cmd_validate(_args([mixed_dir], junit=True)) == 1

        report = tmp_path / "report.xml"
        assert report.exists()
        root = ET.parse(report).getroot()
        assert len(root.findall("testsuite")) == 4

    def test_junit_report_lists_unreadable_documents(self, valid_dir, tmp_path):
        (valid_dir / "latin1.json").write_bytes(b'{"title": "caf\xe9"}')
        target = tmp_path / "junit.xml"

        assert cmd_validate(_args([valid_dir], junit=True, junit_path=target)) == 1

        root = ET.parse(target).getroot()
        suite = root.find("testsuite[@name='latin1.json']")
        assert suite is not None
        assert suite.find("testcase[@name='json']/failure") is not None
        assert root.get("failures") == "1"

    def test_junit_custom_path(self, valid_dir, tmp_path):
        target = tmp_path / "build" / "junit.xml"
        assert cmd_validate(_args([valid_dir], junit=True, junit_path=target)) == 0
        assert target.exists()

    def test_junit_path_without_flag_writes_nothing(self, valid_dir, tmp_path):
        target = tmp_path / "junit.xml"
        cmd_validate(_args([valid_dir], junit_path=target))
        assert not target.exists()

    def test_json_report(self, mixed_dir, tmp_path):
        target = tmp_path / "report.json"
        cmd_validate(_args([mixed_dir], report_json=target))

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["metadata"]["offline"] is True
        assert data["summary"]["invalid"] == 1

    def test_config_file(self, valid_dir, tmp_path):
        config = tmp_path / "validator.yaml"
        target = tmp_path / "from-config.xml"
        config.write_text(f"offline: true\njunit: true\njunit_path: {target}\n", encoding="utf-8")

        assert cmd_validate(_args([valid_dir], offline=False, config=str(config))) == 0
        assert target.exists()

    def test_bad_config_file(self, valid_dir, tmp_path):
        config = tmp_path / "validator.yaml"
        config.write_text("colour: red\n", encoding="utf-8")
        assert cmd_validate(_args([valid_dir], config=str(config))) == 2

    def test_online_uses_jsonld_processor(self, valid_dir, stub_processor):
        with patch(
            "td_validator.validation.runner.PyLdProcessor", return_value=stub_processor
        ) as mock_processor:
            assert cmd_validate(_args([valid_dir], offline=False, jsonld_timeout=5.0)) == 0

        mock_processor.assert_called_once_with(timeout=5.0)
        # The TM and both TDs reach the JSON-LD stage
        assert len(stub_processor.calls) == 3

    def test_online_jsonld_failure(self, tmp_path, write_document, documents, failing_processor):
        path = write_document("MinimalThing.json", documents["minimal_td"])
        with patch("td_validator.validation.runner.PyLdProcessor", return_value=failing_processor):
            assert cmd_validate(_args([path], offline=False)) == 1


class TestMain:
    """Tests for argument parsing and the entry point."""

    def test_validate_flags(self):
        args = build_parser().parse_args(["validate", "-o", "-j", "a.json", "things/"])
        assert args.paths == ["a.json", "things/"]
        assert args.offline is True
        assert args.junit is True
        assert args.func is cmd_validate

    def test_validate_requires_paths(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["validate"])

    def test_main_runs_validate(self, valid_dir):
        with patch("td_validator.interfaces.cli.main.setup_logging"):
            assert main(["validate", "--offline", "--no-progress", str(valid_dir)]) == 0

    def test_main_exit_code_on_failure(self, mixed_dir):
        with patch("td_validator.interfaces.cli.main.setup_logging"):
            assert main(["validate", "--offline", "--no-progress", str(mixed_dir)]) == 1

    @pytest.mark.parametrize("name,title", [("td", "Thing Description"), ("tm", "Thing Model")])
    def test_schema_command(self, name, title, capsys):
        with patch("td_validator.interfaces.cli.main.setup_logging"):
            assert main(["schema", name]) == 0
        schema = json.loads(capsys.readouterr().out)
        assert schema["title"] == title

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "td-validator" in capsys.readouterr().out
