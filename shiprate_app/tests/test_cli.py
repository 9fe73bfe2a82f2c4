"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import logging

import pytest

from shiprate_app import main as cli
from shiprate_app.repositories import database


@pytest.fixture(autouse=True)
def _reset_database():
    yield
    if database.SessionLocal is not None:
        database.SessionLocal.kw["bind"].dispose()
    database.SessionLocal = None
    # init_logging attaches a FileHandler under tmp_path; drop it between tests
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def rating_file(tmp_path):
    path = tmp_path / "rating.json"
    path.write_text(
        json.dumps(
            {
                "ship_name": "MSC Divina",
                "ship_code": "9585285",
                "cabin_type": "PRT",
                "disembarkation_date": "2024-05-01",
                "criteria": {"food": {"score": "4,5"}, "cabin_cleanliness": {"score": 3}},
                "info": {"frigobar": True},
            }
        ),
        encoding="utf-8",
    )
    return path


def _run(tmp_path, *argv):
    return cli.main(["--data-dir", str(tmp_path / "data"), *argv])


def test_submit_and_search(tmp_path, rating_file, capsys):
    assert _run(tmp_path, "submit", str(rating_file), "--user", "pilot-1") == 0
    out = capsys.readouterr().out
    assert "Saved rating" in out
    assert "Food: 4.5" in out

    assert _run(tmp_path, "search", "divina") == 0
    assert "MSC Divina IMO 9585285" in capsys.readouterr().out
    assert (tmp_path / "data" / "shiprate.db").exists()


def test_submit_without_user_fails(tmp_path, rating_file, capsys):
    assert _run(tmp_path, "submit", str(rating_file)) == 1
    assert "not authenticated" in capsys.readouterr().err


def test_dashboard_and_export(tmp_path, rating_file, capsys):
    _run(tmp_path, "submit", str(rating_file), "--user", "pilot-1", "--name", "Silva")
    capsys.readouterr()

    assert _run(tmp_path, "my-ratings", "--user", "pilot-1") == 0
    ship_id, rating_id = capsys.readouterr().out.split()[0].split("/")

    assert _run(tmp_path, "dashboard", "--user", "pilot-1") == 0
    assert "Ships: 1  Ratings: 1  Mine: 1" in capsys.readouterr().out

    assert _run(tmp_path, "show", ship_id) == 0
    assert "1 rating(s)" in capsys.readouterr().out

    out_dir = tmp_path / "pdf"
    out_dir.mkdir()
    assert _run(tmp_path, "export-pdf", ship_id, rating_id, "--out", str(out_dir)) == 0
    assert (out_dir / "ShipRate_MSC.pdf").exists()


def test_show_missing_ship(tmp_path, capsys):
    assert _run(tmp_path, "show", "nope") == 1
    assert "not found" in capsys.readouterr().err


def test_suggest(tmp_path, capsys):
    assert _run(tmp_path, "suggest", "--message", "Dark mode please") == 0
    assert "Suggestion" in capsys.readouterr().out


def test_unreadable_rating_file(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert _run(tmp_path, "submit", str(bad), "--user", "pilot-1") == 1
    assert "Cannot read rating file" in capsys.readouterr().err

    assert _run(tmp_path, "submit", str(tmp_path / "missing.json"), "--user", "pilot-1") == 1
    assert "Cannot read rating file" in capsys.readouterr().err


def test_malformed_criteria_are_ignored(tmp_path, capsys):
    path = tmp_path / "rating.json"
    path.write_text(
        json.dumps(
            {
                "ship_name": "Atlantic",
                "ship_code": 9000001,
                "disembarkation_date": "2024-05-01",
                "criteria": ["food"],
                "info": ["minibar"],
            }
        ),
        encoding="utf-8",
    )
    assert _run(tmp_path, "submit", str(path), "--user", "pilot-1") == 0
    assert "Saved rating" in capsys.readouterr().out

    assert _run(tmp_path, "search", "9000001") == 0
    assert "Atlantic IMO 9000001" in capsys.readouterr().out


def test_edit_renames_and_delete(tmp_path, rating_file, capsys):
    _run(tmp_path, "submit", str(rating_file), "--user", "pilot-1")
    _run(tmp_path, "my-ratings", "--user", "pilot-1")
    ship_id, rating_id = capsys.readouterr().out.splitlines()[-1].split()[0].split("/")

    edit_file = tmp_path / "edit.json"
    edit_file.write_text(
        json.dumps(
            {
                "ship_name": "MSC Divina II",
                "cabin_type": "Owner",
                "disembarkation_date": "2024-05-03",
                "criteria": {"food": {"score": 2}},
            }
        ),
        encoding="utf-8",
    )
    assert _run(tmp_path, "edit", ship_id, rating_id, str(edit_file), "--user", "pilot-2") == 1
    assert "Only the author" in capsys.readouterr().err

    assert _run(tmp_path, "edit", ship_id, rating_id, str(edit_file), "--user", "pilot-1") == 0
    capsys.readouterr()
    assert _run(tmp_path, "show", ship_id) == 0
    out = capsys.readouterr().out
    assert out.startswith("MSC Divina II (IMO: 9585285)")
    assert "Food: 2.0" in out

    assert _run(tmp_path, "delete", ship_id, rating_id, "--user", "pilot-1") == 0
    assert "0 criteria still rated" in capsys.readouterr().out


def test_submit_help_lists_cabin_types(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        _run(tmp_path, "submit", "--help")
    assert exc.value.code == 0
    assert "Pilot, Owner, Spare Officer, Crew" in capsys.readouterr().out
