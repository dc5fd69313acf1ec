"""View template indexer."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from ..models import SiteHandle, ViewInfo
from ..normalize import TEMPLATE_SUFFIXES, view_keys, view_name, view_name_variants
from .base import Generation, Indexer


class ViewGeneration(Generation[ViewInfo]):
    def add(self, info: ViewInfo) -> None:
        site = SiteHandle(path=info.file, line=0)
        for key in view_keys(info.name, info.extension):
            self.entries[key] = info
            self.sites[key] = [site]

    def __len__(self) -> int:
        return len({info.file for info in self.entries.values()})


class ViewIndexer(Indexer[ViewGeneration]):
    """Indexes Blade and plain PHP templates under the conventional view roots."""

    kind = "view"

    def view_roots(self) -> List[Tuple[Path, str]]:
        """``(directory, namespace)`` pairs for every existing view root."""
        tree = self.tree
        candidates: List[Tuple[Path, str]] = [
            (tree.path("resources", "views"), ""),
            (tree.path("app", "views"), ""),
            (tree.path("vendor", "views"), "vendor"),
        ]
        for module in tree.subdirectories(tree.path("Modules")):
            candidates.append((module / "Resources" / "views", f"modules.{module.name}"))
        candidates.extend((tree.path(extra), "") for extra in tree.config.views.roots)
        return [(directory, namespace) for directory, namespace in candidates if directory.is_dir()]

    def _build(self) -> ViewGeneration:
        generation = ViewGeneration()
        for directory, namespace in self.view_roots():
            root = self.tree.relative(directory)
            for path in self.tree.walk(directory, honor_excludes=False):
                if not path.name.lower().endswith(TEMPLATE_SUFFIXES):
                    continue
                relative = path.relative_to(directory).as_posix()
                name, extension = view_name(relative, namespace)
                if not name:
                    continue
                generation.add(ViewInfo(name=name, path=relative, extension=extension, root=root))
        return generation

    def get_all(self) -> List[str]:
        """Canonical view names; aliases resolve through ``get`` but are not listed."""
        return list(dict.fromkeys(info.name for info in self.generation.entries.values()))

    def get(self, key: str) -> Optional[ViewInfo]:
        return self.generation.entries.get(key)

    def get_path(self, key: str) -> str:
        info = self.get(key)
        return info.path if info is not None else ""

    def resolve(self, name: str) -> Optional[ViewInfo]:
        """First cached view matching any lookup variant of ``name``."""
        entries = self.generation.entries
        for variant in view_name_variants(name):
            info = entries.get(variant)
            if info is not None:
                return info
        return None

    def find_declarations(self, name: str) -> List[SiteHandle]:
        """Every template file matching ``name``: cached variants first, then path probing."""
        entries = self.generation.entries
        files: List[str] = []
        for variant in view_name_variants(name):
            info = entries.get(variant)
            if info is not None and (self.tree.root / info.file).is_file() and info.file not in files:
                files.append(info.file)

        if not files:
            slashed = name.replace(".", "/")
            probes = [f"{slashed}.blade.php", f"{slashed}.php", f"{name}.blade.php", f"{name}.php"]
            for directory, _ in self.view_roots():
                for probe in probes:
                    candidate = directory / probe
                    if candidate.is_file():
                        relative = self.tree.relative(candidate)
                        if relative not in files:
                            files.append(relative)
        return [SiteHandle(path=file, line=0) for file in files]


__all__ = ["ViewGeneration", "ViewIndexer"]
