"""Helper utilities for constructing temporary Laravel projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from tree_sitter import Node

from laraindex.facade import ProjectIndex
from laraindex.project import ProjectTree
from laraindex.syntax import PhpDocument, PhpParser
from laraindex.syntax.php import iter_string_literals, string_value


class ProjectBuilder:
    """Utility for writing files into a throwaway project and indexing it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "app"
        self.root.mkdir()
        self.parser = PhpParser()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def tree(self) -> ProjectTree:
        return ProjectTree(self.root)

    def index(self) -> ProjectIndex:
        """Return a fresh index over the project contents."""
        return ProjectIndex.open(self.root)

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


def parse_php(source: str, path: str = "app/Http/example.php") -> PhpDocument:
    """Parse a dedented PHP snippet."""
    return PhpParser().parse(textwrap.dedent(source).lstrip("\n"), path)


def find_literal(document: PhpDocument, value: str, occurrence: int = 0) -> Node:
    """Return the `occurrence`-th string literal whose contents equal `value`."""
    matches = [node for node in iter_string_literals(document.root) if string_value(node) == value]
    return matches[occurrence]


__all__ = ["ProjectBuilder", "find_literal", "parse_php"]
