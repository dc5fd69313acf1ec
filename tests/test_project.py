"""Tests for laraindex.project."""

from __future__ import annotations

from pathlib import Path

import pytest

from laraindex.project import ExcludeRules, ProjectTree, is_blade, line_index
from tests._fixtures.project_builder import ProjectBuilder


def test_project_tree_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ProjectTree(tmp_path / "missing")


def test_project_tree_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "composer.json"
    target.write_text("{}", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        ProjectTree(target)


def test_walk_skips_builtin_and_configured_excludes(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/Http/Controllers/HomeController.php": "<?php\n",
            "vendor/laravel/framework/src/Router.php": "<?php\n",
            "node_modules/vue/index.js": "export default {}\n",
            "storage/framework/views/cached.php": "<?php\n",
            "legacy/old.php": "<?php\n",
            "build/bundle.js": "console.log(1)\n",
            ".gitignore": "build/\n",
            ".laraindex.yml": "exclude_paths:\n  - legacy/\n",
        }
    )

    tree = project_builder.tree()
    files = [tree.relative(path) for path in tree.walk()]

    assert "app/Http/Controllers/HomeController.php" in files
    assert not any(path.startswith(("vendor/", "node_modules/", "storage/", "legacy/", "build/")) for path in files)
    assert files == sorted(files)


def test_walk_without_excludes_lists_every_file(project_builder: ProjectBuilder) -> None:
    project_builder.write({"vendor/views/mail.blade.php": "<p>hi</p>\n"})
    tree = project_builder.tree()

    files = [tree.relative(path) for path in tree.walk(tree.path("vendor"), honor_excludes=False)]

    assert files == ["vendor/views/mail.blade.php"]


def test_read_text_returns_none_for_unreadable_file(project_builder: ProjectBuilder) -> None:
    project_builder.write({"routes/web.php": "<?php\n"})
    binary = project_builder.path() / "public" / "broken.php"
    binary.parent.mkdir(parents=True)
    binary.write_bytes(b"\xff\xfe\x00bad")
    tree = project_builder.tree()

    assert tree.read_text(tree.path("routes", "web.php")) == "<?php\n"
    assert tree.read_text(binary) is None
    assert tree.read_text(tree.path("missing.php")) is None


def test_line_index_and_blade_detection() -> None:
    text = "first\nsecond\nthird"
    assert line_index(text, 0) == 0
    assert line_index(text, text.index("third")) == 2
    assert is_blade("resources/views/home.blade.php")
    assert not is_blade("routes/web.php")


def test_exclude_rules_follow_gitignore_precedence() -> None:
    rules = ExcludeRules.from_lines(
        [
            "# build output",
            "*.log",
            "!keep.log",
            "/public/hot",
            "dist/",
        ]
    )

    assert rules.excludes("storage/laravel.log", False)
    assert not rules.excludes("keep.log", False)
    assert rules.excludes("public/hot", False)
    assert not rules.excludes("resources/public/hot", False)
    assert rules.excludes("resources/js/dist", True)
    assert not rules.excludes("dist", False)
