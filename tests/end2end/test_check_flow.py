from __future__ import annotations

import json
import sys
from subprocess import run as subprocess_run  # noqa: S404
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def _run_check(definition_path: Path, data_path: Path, cwd: Path):
    return subprocess_run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "bindforms.cli",
            "check",
            "--definition",
            str(definition_path),
            "--data",
            str(data_path),
        ],
        capture_output=True,
        text=True,
        check=False,
        cwd=cwd,
    )


def test_check_flow_reports_field_errors(tmp_path: Path) -> None:
    definition_path = tmp_path / "form.json"
    definition_path.write_text(
        json.dumps(
            {
                "fields": [
                    {"bindTo": "name", "required": True},
                    {"bindTo": "arrayItems", "type": "items", "items": [{"bindTo": "name", "minLength": 3}]},
                ],
            },
        ),
        encoding="utf-8",
    )
    data_path = tmp_path / "data.json"
    data_path.write_text(json.dumps({"name": "", "arrayItems": [{"name": "John"}, {"name": "Bo"}]}), encoding="utf-8")

    result = _run_check(definition_path, data_path, tmp_path)

    assert result.returncode == 1
    report = json.loads(result.stdout)
    assert report["errors"] == 2
    assert report["fields"]["arrayItems[0].name"]["isValid"] is True
    assert report["fields"]["arrayItems[1].name"]["isValid"] is False


def test_check_flow_accepts_valid_data(tmp_path: Path) -> None:
    definition_path = tmp_path / "form.json"
    definition_path.write_text(json.dumps({"fields": [{"bindTo": "name", "required": True}]}), encoding="utf-8")
    data_path = tmp_path / "data.json"
    data_path.write_text(json.dumps({"name": "Jane"}), encoding="utf-8")

    result = _run_check(definition_path, data_path, tmp_path)

    assert result.returncode == 0
    assert json.loads(result.stdout)["valid"] is True
