from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from tablecodec.cli import main as cli_main
from tablecodec.errors import InvalidParametersError

"""Exit code contract: 0 all success, 1 fatal, 2 partial failure."""


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # no config/tablecodec.yml -> exit 1
    code = cli_main(["run"])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_missing_workbook(write_config: Path, capsys):
    code = cli_main(["run"])
    assert code == 1
    assert "ERROR run: workbook not found" in capsys.readouterr().out


def test_exit_code_all_success(write_config: Path, people_xlsx: Path, write_json, capsys):
    write_json("upsert.json", [{"Name": "Carl", "Age": 40}])
    write_json("ages.json", [{"Name": "Carl", "Age": 41}])
    code = cli_main(["run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY jobs=3/3 success=3 failed=0" in out


def test_exit_code_partial_failure(write_config: Path, people_xlsx: Path, write_json, capsys):
    write_json("upsert.json", [{"Name": "Carl", "Age": 40}])
    write_json("ages.json", [{"Name": "Carl", "Age": 41}])
    with patch(
        "tablecodec.services.orchestrator.find_and_update",
        side_effect=InvalidParametersError("bad fields"),
    ):
        code = cli_main(["run"])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY jobs=3/3 success=2 failed=1" in out


def test_exit_code_single_command_fatal(people_xlsx: Path, write_json):
    records = write_json("w.json", [{"Name": "x"}])
    assert cli_main(["--workbook", str(people_xlsx), "upsert", "People", "--input", str(records), "--match", "Email"]) == 1
