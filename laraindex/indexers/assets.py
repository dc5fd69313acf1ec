"""Static asset indexer."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from ..models import AssetInfo, AssetType, SiteHandle
from ..normalize import asset_lookup_variants, asset_type_for, file_extension, is_asset_extension
from .base import Generation, Indexer

RESOURCE_ASSET_DIRECTORIES = ("js", "css", "sass", "scss")
NODE_LIBRARIES = ("bootstrap", "jquery", "vue", "react", "alpinejs", "tailwindcss", "livewire")


class AssetGeneration(Generation[AssetInfo]):
    def add(self, info: AssetInfo) -> None:
        # Earlier roots win; ``public`` is scanned first.
        if info.name in self.entries:
            return
        self.entries[info.name] = info
        self.sites[info.name] = [SiteHandle(path=info.file, line=0)]


class AssetIndexer(Indexer[AssetGeneration]):
    """Indexes public and source assets keyed by their referenced path."""

    kind = "asset"

    def asset_roots(self) -> List[Tuple[Path, str]]:
        """``(directory, key prefix)`` pairs in scan order."""
        tree = self.tree
        roots: List[Tuple[Path, str]] = [
            (tree.path("public"), ""),
            (tree.path("resources", "assets"), "assets"),
        ]
        roots.extend((tree.path("resources", name), name) for name in RESOURCE_ASSET_DIRECTORIES)
        roots.extend(
            (tree.path("node_modules", library, "dist"), f"node_modules/{library}/dist")
            for library in NODE_LIBRARIES
        )
        roots.extend((tree.path(extra), "") for extra in tree.config.assets.roots)
        return [(directory, prefix) for directory, prefix in roots if directory.is_dir()]

    def _build(self) -> AssetGeneration:
        generation = AssetGeneration()
        for directory, prefix in self.asset_roots():
            for path in self.tree.walk(directory, honor_excludes=False):
                if not is_asset_extension(path.name):
                    continue
                relative = path.relative_to(directory).as_posix()
                name = f"{prefix}/{relative}" if prefix else relative
                generation.add(
                    AssetInfo(
                        name=name,
                        path=relative,
                        extension=file_extension(path.name),
                        type=asset_type_for(path.name),
                        file=self.tree.relative(path),
                    )
                )
        return generation

    def get(self, key: str) -> Optional[AssetInfo]:
        return self.generation.entries.get(key)

    def get_path(self, key: str) -> str:
        info = self.get(key)
        return info.path if info is not None else ""

    def get_type(self, key: str) -> AssetType:
        info = self.get(key)
        return info.type if info is not None else AssetType.OTHER

    def resolve(self, name: str) -> Optional[AssetInfo]:
        """Cached asset for a referenced path (``/css/app.css``, ``resources/js/app.js``, ...)."""
        entries = self.generation.entries
        for variant in asset_lookup_variants(name):
            info = entries.get(variant)
            if info is not None:
                return info
        return None

    def find_declarations(self, name: str) -> List[SiteHandle]:
        info = self.resolve(name)
        if info is None:
            return []
        return [SiteHandle(path=info.file, line=0)]


__all__ = ["AssetGeneration", "AssetIndexer", "NODE_LIBRARIES", "RESOURCE_ASSET_DIRECTORIES"]
