"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json

import pytest

from laraindex.cli import _build_parser, main
from tests._fixtures.project_builder import ProjectBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "scan"])
    assert args.verbose is True
    assert args.command == "scan"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["routes", "--verbose", "--json"])
    assert args.verbose is True
    assert args.json is True


def test_cli_rejects_unknown_usage_kind() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["usages", ".", "widget", "home"])


def test_cli_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "/srv/app"])
    assert (args.path, args.host, args.port) == ("/srv/app", "127.0.0.1", 8000)


@pytest.fixture
def project(project_builder: ProjectBuilder) -> str:
    project_builder.write(
        {
            "routes/web.php": """
            <?php

            Route::get('/', 'HomeController')->name('home');
            """,
            "app/Http/Controllers/HomeController.php": """
            <?php

            return redirect()->route('home');
            """,
        }
    )
    return str(project_builder.path())


def test_scan_prints_counts(project: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["scan", project])

    out = capsys.readouterr().out
    assert "Indexed 1 routes" in out
    assert "1 usages across 2 files" in out


def test_routes_json_output(project: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["routes", project, "--json"])

    rows = json.loads(capsys.readouterr().out)
    assert rows == [
        {
            "name": "home",
            "method": "GET",
            "path": "/",
            "action": "HomeController",
            "middleware": [],
            "domain": None,
            "file": "routes/web.php",
            "line": 2,
        }
    ]


def test_lookup_and_usages_commands(project: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["lookup", project, "home"])
    lookup = capsys.readouterr().out
    assert lookup.splitlines()[0] == "home: route"
    assert "declared at routes/web.php:3" in lookup

    main(["usages", project, "route", "home"])
    usages = capsys.readouterr().out
    assert usages.strip() == "app/Http/Controllers/HomeController.php:3 name"


def test_lookup_unknown_key_exits_non_zero(project: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["lookup", project, "missing.key"])
    assert excinfo.value.code == 1


def test_missing_project_exits_non_zero(tmp_path) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(SystemExit) as excinfo:
        main(["scan", str(tmp_path / "nope")])
    assert excinfo.value.code == 1
