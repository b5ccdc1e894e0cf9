"""Tests for CLI module - value parsing and command structure."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from dnp3_fmb import PointCategory
from dnp3_fmb.cli import app, load_updates, parse_bool, parse_native

runner = CliRunner()

MAPPING = [
    {"category": "analog", "index": 0, "reading": "battery.soc", "transform": {"type": "scale", "factor": 0.5}},
    {"category": "analog", "index": 1, "reading": "battery.power"},
    {"category": "status", "index": 3, "key": "breaker.closed"},
    {"category": "counter", "index": 7, "reading": "meter.energy"},
]


@pytest.fixture
def mapping_file(tmp_path: Path) -> Path:
    p = tmp_path / "mapping.json"
    p.write_text(json.dumps({"entries": MAPPING}), encoding="utf-8")
    return p


# ============================================================================
# Value Parsing Tests
# ============================================================================


class TestParseBool:
    """Test boolean value parsing."""

    def test_true_variants(self) -> None:
        for val in ["true", "True", "TRUE", "1", "on", "ON", "yes", "YES"]:
            assert parse_bool(val) is True

    def test_false_variants(self) -> None:
        for val in ["false", "False", "FALSE", "0", "off", "OFF", "no", "NO"]:
            assert parse_bool(val) is False

    def test_invalid_values(self) -> None:
        with pytest.raises(ValueError, match="Invalid boolean value"):
            parse_bool("maybe")
        with pytest.raises(ValueError):
            parse_bool("")


class TestParseNative:
    """Test parsing by category native type."""

    def test_by_category(self) -> None:
        assert parse_native(PointCategory.STATUS, "on") is True
        assert parse_native(PointCategory.COUNTER, " 42 ") == 42
        assert parse_native(PointCategory.ANALOG, "1.25") == 1.25
        assert parse_native(PointCategory.SETPOINT_STATUS, "3") == 3.0

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_native(PointCategory.COUNTER, "1.5")


def test_load_updates_skips_header_and_blank_rows(tmp_path: Path) -> None:
    p = tmp_path / "updates.csv"
    p.write_text("session,category,index,value\n1,analog,0,10.0\n\n1,Status,3,true\n", encoding="utf-8")
    rows = load_updates(p)
    assert rows == [("1", PointCategory.ANALOG, 0, 10.0), ("1", PointCategory.STATUS, 3, True)]


def test_load_updates_reports_line(tmp_path: Path) -> None:
    p = tmp_path / "updates.csv"
    p.write_text("1,analog,0,10.0\n1,bogus,0,1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="line 2"):
        load_updates(p)


# ============================================================================
# Command Tests
# ============================================================================


def test_info_command() -> None:
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "version:" in result.stdout.lower()
    assert "setpoint_status" in result.stdout


def test_info_command_json() -> None:
    result = runner.invoke(app, ["info", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["categories"]["counter"] == "integer"


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "dnp3-fmb" in result.stdout


def test_validate_command(mapping_file: Path) -> None:
    result = runner.invoke(app, ["validate", "--mapping", str(mapping_file), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["entries"] == 4
    assert data["categories"]["analog"] == {"keys": 0, "readings": 2}
    assert data["categories"]["status"] == {"keys": 1, "readings": 0}


def test_validate_command_envvar(mapping_file: Path) -> None:
    result = runner.invoke(app, ["validate"], env={"DNP3FMB_MAPPING": str(mapping_file)})
    assert result.exit_code == 0
    assert "OK: 4 entries" in result.stdout


def test_validate_command_invalid_mapping(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text(json.dumps([{"category": "status", "index": -1, "key": "x"}]), encoding="utf-8")
    result = runner.invoke(app, ["validate", "--mapping", str(p)])
    assert result.exit_code == 2


def test_validate_command_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", "--mapping", str(tmp_path / "missing.json")])
    assert result.exit_code == 2


def test_explain_command_reading(mapping_file: Path) -> None:
    result = runner.invoke(app, ["explain", "analog", "0", "--mapping", str(mapping_file), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data == {
        "category": "analog",
        "index": 0,
        "native_kind": "float",
        "target": "reading",
        "id": "battery.soc",
        "transform": True,
    }


def test_explain_command_key_text(mapping_file: Path) -> None:
    result = runner.invoke(app, ["explain", "Status", "3", "--mapping", str(mapping_file)])
    assert result.exit_code == 0
    assert "key" in result.stdout
    assert "breaker.closed" in result.stdout


def test_explain_command_unmapped(mapping_file: Path) -> None:
    result = runner.invoke(app, ["explain", "analog", "999", "--mapping", str(mapping_file), "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["target"] == "unmapped"


def test_explain_command_invalid_category(mapping_file: Path) -> None:
    result = runner.invoke(app, ["explain", "frozen", "0", "--mapping", str(mapping_file)])
    assert result.exit_code == 2


def test_replay_command(mapping_file: Path, tmp_path: Path) -> None:
    updates = tmp_path / "updates.csv"
    updates.write_text(
        "session,category,index,value\n"
        "1,analog,1,10.5\n"
        "1,analog,0,200\n"
        "1,status,3,true\n"
        "1,analog,999,1.0\n"
        "2,analog,999,1.0\n"
        "3,counter,7,12\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["replay", str(updates), "--mapping", str(mapping_file)])
    assert result.exit_code == 0

    lines = [json.loads(line) for line in result.stdout.splitlines() if line.strip()]
    assert len(lines) == 2
    first, second = lines
    assert first["readings"] == [
        {"reading": "battery.power", "kind": "float", "value": 10.5},
        {"reading": "battery.soc", "kind": "float", "value": 100.0},
    ]
    assert first["keys"] == [{"key": "breaker.closed", "kind": "boolean", "value": True}]
    assert second["batch"] == 2
    assert second["readings"] == [{"reading": "meter.energy", "kind": "integer", "value": 12}]
    assert second["keys"] == []


def test_replay_command_bad_updates(mapping_file: Path, tmp_path: Path) -> None:
    updates = tmp_path / "updates.csv"
    updates.write_text("1,counter,7,abc\n", encoding="utf-8")
    result = runner.invoke(app, ["replay", str(updates), "--mapping", str(mapping_file)])
    assert result.exit_code == 2


def test_replay_command_missing_updates(mapping_file: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["replay", str(tmp_path / "none.csv"), "--mapping", str(mapping_file)])
    assert result.exit_code == 2


def test_validate_command_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", "--mapping", str(tmp_path)])
    assert result.exit_code == 2


def test_validate_command_not_utf8(tmp_path: Path) -> None:
    p = tmp_path / "mapping.json"
    p.write_bytes(b"\xff\xfe not json")
    result = runner.invoke(app, ["validate", "--mapping", str(p)])
    assert result.exit_code == 2


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant: {name}")


def test_replay_command_non_finite_values_are_valid_json(mapping_file: Path, tmp_path: Path) -> None:
    updates = tmp_path / "updates.csv"
    updates.write_text("1,analog,1,nan\n1,analog,0,inf\n2,analog,1,-inf\n", encoding="utf-8")
    result = runner.invoke(app, ["replay", str(updates), "--mapping", str(mapping_file)])
    assert result.exit_code == 0

    lines = [
        json.loads(line, parse_constant=_reject_constant) for line in result.stdout.splitlines() if line.strip()
    ]
    assert len(lines) == 2
    assert lines[0]["readings"] == [
        {"reading": "battery.power", "kind": "float", "value": "nan"},
        {"reading": "battery.soc", "kind": "float", "value": "inf"},
    ]
    assert lines[1]["readings"] == [{"reading": "battery.power", "kind": "float", "value": "-inf"}]
