"""Base class for declaration indexers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Generic, List, Optional, TypeVar

from ..logging import get_logger, log_duration
from ..models import SiteHandle
from ..project import ProjectTree
from ..syntax.php import PhpDocument, PhpParser

E = TypeVar("E")


class Generation(Generic[E]):
    """One immutable scan result: canonical key -> entry, plus declaration sites."""

    def __init__(self) -> None:
        self.entries: Dict[str, E] = {}
        self.sites: Dict[str, List[SiteHandle]] = {}

    def add_site(self, key: str, site: SiteHandle) -> None:
        sites = self.sites.setdefault(key, [])
        if site not in sites:
            sites.append(site)

    def __len__(self) -> int:
        return len(self.entries)


G = TypeVar("G", bound=Generation)


class Indexer(ABC, Generic[G]):
    """Scans one artifact domain into a generation that is swapped in whole.

    Rebuilds are serialised by a lock; readers always see either the
    previous generation or the complete new one.
    """

    kind = "artifact"

    def __init__(self, tree: ProjectTree, parser: PhpParser) -> None:
        self.tree = tree
        self.parser = parser
        self.logger = get_logger(f"indexers.{self.kind}")
        self._lock = threading.Lock()
        self._generation: Optional[G] = None

    @abstractmethod
    def _build(self) -> G:
        """Scan the project and return a fresh generation."""

    def scan(self) -> G:
        """Rebuild the index from source."""
        with self._lock:
            self.logger.info("Scanning %s declarations in %s", self.kind, self.tree.root)
            with log_duration(self.logger, f"{self.kind} scan"):
                generation = self._build()
            self._generation = generation
        self.logger.info("Indexed %d %s keys", len(generation), self.kind)
        return generation

    @property
    def generation(self) -> G:
        current = self._generation
        if current is None:
            with self._lock:
                current = self._generation
            if current is None:
                current = self.scan()
        return current

    def warm(self) -> G:
        """Return the current generation, scanning first when cold."""
        return self.generation

    def get_all(self) -> List[str]:
        return list(self.generation.entries)

    def get(self, key: str) -> Optional[object]:
        return self.generation.entries.get(key)

    def is_known(self, text: str) -> bool:
        return text in self.generation.entries

    def get_declaration(self, key: str) -> List[SiteHandle]:
        return list(self.generation.sites.get(key, []))

    def _parse(self, path: Path) -> Optional[PhpDocument]:
        text = self.tree.read_text(path)
        if text is None:
            return None
        try:
            return self.parser.parse(text, self.tree.relative(path))
        except (ValueError, RuntimeError) as exc:
            self.logger.debug("Failed to parse %s: %s", path, exc, exc_info=True)
            return None


__all__ = ["Generation", "Indexer"]
