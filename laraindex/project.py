"""Read-only access to a Laravel project on disk."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .config import LaraIndexConfig, load_config
from .logging import get_logger

# Directories that never hold first-party declarations or references.
SKIPPED_DIRECTORIES = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
        ".laraindex",
        "__pycache__",
        "bootstrap/cache",
        "node_modules",
        "storage",
        "vendor",
    }
)
SKIPPED_FILES = frozenset({".DS_Store", "Thumbs.db"})

BLADE_SUFFIX = ".blade.php"


@dataclass(frozen=True)
class ExcludePattern:
    """One gitignore-style pattern (``build/``, ``/public/hot``, ``!keep.php``)."""

    glob: str
    negated: bool = False
    directories_only: bool = False
    rooted: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["ExcludePattern"]:
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        negated = text.startswith("!")
        text = text.lstrip("!")
        directories_only = text.endswith("/")
        rooted = text.startswith("/") or "/" in text.strip("/")
        glob = text.strip("/")
        if not glob:
            return None
        return cls(glob=glob, negated=negated, directories_only=directories_only, rooted=rooted)

    def applies_to(self, relative: str, is_dir: bool) -> bool:
        if self.rooted:
            if fnmatchcase(relative, self.glob):
                return not self.directories_only or is_dir
            # Files below a matched directory are covered by the directory match.
            return self.directories_only and relative.startswith(f"{self.glob}/")
        if self.directories_only and not is_dir:
            return False
        return any(fnmatchcase(segment, self.glob) for segment in relative.split("/"))


@dataclass
class ExcludeRules:
    """Ordered patterns; the last matching pattern decides, as in ``.gitignore``."""

    patterns: List[ExcludePattern] = field(default_factory=list)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExcludeRules":
        rules = cls()
        rules.extend(lines)
        return rules

    def extend(self, lines: Iterable[str]) -> None:
        for line in lines:
            pattern = ExcludePattern.parse(line)
            if pattern is not None:
                self.patterns.append(pattern)

    def excludes(self, relative: str, is_dir: bool) -> bool:
        verdict = False
        for pattern in self.patterns:
            if pattern.applies_to(relative, is_dir):
                verdict = not pattern.negated
        return verdict


def line_index(text: str, offset: int) -> int:
    """0-based line number of a character offset."""
    return text.count("\n", 0, offset)


def is_blade(path: Path | str) -> bool:
    return str(path).lower().endswith(BLADE_SUFFIX)


class ProjectTree:
    """A Laravel project root with its exclude rules and configuration."""

    def __init__(self, root: str | Path, config: Optional[LaraIndexConfig] = None) -> None:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not resolved.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        self.root = resolved
        self.config = config if config is not None else load_config(resolved)
        self.logger = get_logger("project")
        self.excludes = ExcludeRules()
        gitignore = self.read_text(resolved / ".gitignore")
        if gitignore is not None:
            self.excludes.extend(gitignore.splitlines())
        self.excludes.extend(self.config.exclude_paths)

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def relative(self, path: Path) -> str:
        """Project-relative POSIX path; paths outside the root are returned as given."""
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def children(self, directory: Path) -> List[Path]:
        """Sorted entries of ``directory``; empty when it cannot be listed."""
        try:
            return sorted(directory.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            self.logger.debug("Cannot list %s: %s", directory, exc)
            return []

    def subdirectories(self, directory: Path) -> List[Path]:
        return [child for child in self.children(directory) if child.is_dir()]

    def walk(self, directory: Optional[Path] = None, *, honor_excludes: bool = True) -> Iterator[Path]:
        """Files below ``directory`` (the root by default), depth first in name order.

        With ``honor_excludes`` the built-in skipped directories, ``.gitignore``
        and configured ``exclude_paths`` prune the walk; indexers that read
        conventional roots such as ``vendor/`` or ``node_modules/`` pass
        ``honor_excludes=False``.
        """
        start = directory if directory is not None else self.root
        if start.is_dir():
            yield from self._walk(start, honor_excludes)

    def _walk(self, directory: Path, honor_excludes: bool) -> Iterator[Path]:
        for child in self.children(directory):
            if child.name in SKIPPED_FILES:
                continue
            is_dir = child.is_dir()
            if honor_excludes and self._skipped(child, is_dir):
                continue
            if is_dir:
                yield from self._walk(child, honor_excludes)
            else:
                yield child

    def _skipped(self, path: Path, is_dir: bool) -> bool:
        relative = self.relative(path)
        if is_dir and (path.name in SKIPPED_DIRECTORIES or relative in SKIPPED_DIRECTORIES):
            return True
        return self.excludes.excludes(relative, is_dir)

    def read_text(self, path: Path) -> Optional[str]:
        """File contents, or ``None`` when the file is missing, unreadable or not UTF-8."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.debug("Skipping unreadable file %s: %s", path, exc)
            return None


__all__ = [
    "BLADE_SUFFIX",
    "ExcludePattern",
    "ExcludeRules",
    "ProjectTree",
    "SKIPPED_DIRECTORIES",
    "is_blade",
    "line_index",
]
