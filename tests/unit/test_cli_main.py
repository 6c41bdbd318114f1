from __future__ import annotations

import json
from pathlib import Path

import openpyxl

from tablecodec.cli import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from tablecodec.cli import main as cli_main


def _people(path: Path) -> list[list]:
    ws = openpyxl.load_workbook(path)["People"]
    return [[c.value for c in row] for row in ws.iter_rows(min_row=3, max_col=2)]


def test_cli_read_prints_json(people_xlsx: Path, capsys):
    code = cli_main(["--workbook", str(people_xlsx), "read", "People"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    payload = out[out.index("["):]
    assert json.loads(payload) == [{"Name": "Alice", "Age": 30}, {"Name": "Bob", "Age": 25}]


def test_cli_read_csv(people_xlsx: Path, capsys):
    code = cli_main(["--workbook", str(people_xlsx), "read", "People", "--format", "csv"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "line,Name,Age" in out
    assert "3,Alice,30" in out


def test_cli_read_empty_table(temp_workdir: Path, capsys):
    path = temp_workdir / "data" / "empty.xlsx"
    wb = openpyxl.Workbook()
    wb.active.title = "People"
    wb.active.append(["Name", "Age"])
    wb.save(path)
    code = cli_main(["--workbook", str(path), "read", "People"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "INFO The table 'People' is empty." in out


def test_cli_upsert_saves_workbook(people_xlsx: Path, write_json, capsys):
    records = write_json("upsert.json", [{"Name": "Bob", "Age": 26}, {"Name": "Carl", "Age": 40}])
    code = cli_main(["--workbook", str(people_xlsx), "upsert", "People", "--input", str(records), "--match", "Name"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "upsert: updated=1 inserted=1" in out
    assert _people(people_xlsx) == [["Alice", 30], ["Bob", 26], ["Carl", 40]]


def test_cli_write_overlay(people_xlsx: Path, write_json):
    records = write_json("overlay.json", [{"Age": 31}])
    code = cli_main(
        ["--workbook", str(people_xlsx), "write", "People", "--input", str(records), "--mode", "overlay"]
    )
    assert code == EXIT_SUCCESS_ALL
    assert _people(people_xlsx) == [["Alice", 31], ["Bob", 25]]


def test_cli_find_update_skips_missing_field(people_xlsx: Path, write_json, capsys):
    records = write_json("ages.json", [{"Name": "Alice", "Age": 31}])
    code = cli_main(
        ["--workbook", str(people_xlsx), "find-update", "People",
         "--input", str(records), "--match", "Name", "--fields", "Age", "Email"]
    )
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "WARN Column 'Email' does not exist in 'People'. Skipping this column." in out
    assert _people(people_xlsx)[0] == ["Alice", 31]


def test_cli_invalid_mode_is_fatal(people_xlsx: Path, write_json, capsys):
    records = write_json("w.json", [{"Name": "x"}])
    code = cli_main(["--workbook", str(people_xlsx), "write", "People", "--input", str(records), "--mode", "merge"])
    assert code == EXIT_FATAL
    assert "ERROR write: invalid mode 'merge'" in capsys.readouterr().out


def test_cli_unknown_table_is_fatal(people_xlsx: Path, capsys):
    code = cli_main(["--workbook", str(people_xlsx), "read", "Nope"])
    assert code == EXIT_FATAL
    assert "ERROR read: table not found: Nope" in capsys.readouterr().out


def test_cli_missing_config_is_fatal(temp_workdir: Path, capsys):
    code = cli_main(["run"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_cli_config_from_env_file(temp_workdir: Path, people_xlsx: Path, monkeypatch, capsys):
    cfg = temp_workdir / "config" / "custom.yml"
    cfg.write_text(f"workbook: {people_xlsx.as_posix()}\njobs:\n  - {{op: read, table: People}}\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"TABLECODEC_CONFIG={cfg.as_posix()}\n", encoding="utf-8")
    # set then delete so teardown removes whatever .env loads
    monkeypatch.setenv("TABLECODEC_CONFIG", "")
    monkeypatch.delenv("TABLECODEC_CONFIG")

    code = cli_main(["run"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "SUMMARY jobs=1/1 success=1 failed=0 lines_read=2" in out


def test_cli_run_partial_failure(write_config: Path, people_xlsx: Path, write_json, capsys):
    write_json("upsert.json", [{"Name": "Carl", "Age": 40}])
    # ages.json is missing, so the find_update job fails
    code = cli_main(["run"])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert "SUMMARY jobs=3/3 success=2 failed=1" in out
    assert "ERROR job 2 (find_update on 'People') failed" in out


def test_cli_debug_flag(people_xlsx: Path, capsys):
    cli_main(["--debug", "--workbook", str(people_xlsx), "read", "People"])
    assert "DEBUG debug mode enabled" in capsys.readouterr().out
