"""Stable read API over the four artifact indexes and their usages."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .config import LaraIndexConfig, load_config
from .indexers import AssetIndexer, RouteIndexer, TranslationIndexer, ViewIndexer
from .logging import get_logger
from .models import (
    ArtifactKind,
    AssetType,
    RouteDefinition,
    RouteDomainInfo,
    RouteInfo,
    SiteHandle,
    Usage,
)
from .project import ProjectTree
from .syntax import PhpParser
from .usages import UsageIndex, UsageScanner

T = TypeVar("T")


def _not_found(default: Callable[[], Any]) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Turn a failing lookup into its empty answer."""

    def decorator(method: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(method)
        def wrapper(self: "ProjectIndex", *args: Any, **kwargs: Any) -> T:
            try:
                return method(self, *args, **kwargs)
            except Exception:  # noqa: BLE001 - lookups never raise to callers
                self.logger.debug("Lookup %s%r failed", method.__name__, args, exc_info=True)
                return default()

        return wrapper

    return decorator


def _none() -> None:
    return None


def _false() -> bool:
    return False


def _empty() -> str:
    return ""


class ProjectIndex:
    """Query facade for one Laravel project.

    Every collaborator is passed in explicitly; :meth:`open` wires the
    default set for a project directory. Queries warm the declaration
    indexes on first use, and usage queries additionally run the usage
    scan once the declarations are available.
    """

    def __init__(
        self,
        tree: ProjectTree,
        parser: PhpParser,
        config: LaraIndexConfig,
        routes: RouteIndexer,
        translations: TranslationIndexer,
        views: ViewIndexer,
        assets: AssetIndexer,
        usages: UsageScanner,
    ) -> None:
        self.tree = tree
        self.parser = parser
        self.config = config
        self.routes = routes
        self.translations = translations
        self.views = views
        self.assets = assets
        self.usages = usages
        self.logger = get_logger("facade")

    @classmethod
    def open(cls, root: str | Path, config: Optional[LaraIndexConfig] = None) -> "ProjectIndex":
        """Build an index over ``root`` with the default collaborators."""
        resolved = Path(root).expanduser().resolve()
        if config is None and resolved.is_dir():
            config = load_config(resolved)
        tree = ProjectTree(resolved, config)
        parser = PhpParser()
        routes = RouteIndexer(tree, parser)
        translations = TranslationIndexer(tree, parser)
        views = ViewIndexer(tree, parser)
        assets = AssetIndexer(tree, parser)
        usages = UsageScanner(tree, parser, routes, translations, views, assets)
        return cls(tree, parser, tree.config, routes, translations, views, assets, usages)

    @property
    def root(self) -> Path:
        return self.tree.root

    def refresh(self) -> UsageIndex:
        """Rescan declarations, then references."""
        for indexer in (self.routes, self.translations, self.views, self.assets):
            indexer.scan()
        return self.usages.scan()

    def summary(self) -> Dict[str, int]:
        index = self.usages.index
        return {
            "routes": len(self.routes.get_routes()),
            "translations": len(self.translations.get_all()),
            "views": len(self.views.get_all()),
            "assets": len(self.assets.get_all()),
            "usages": index.total(),
            "files_scanned": index.files_scanned,
        }

    # -- routes -------------------------------------------------------------

    @_not_found(list)
    def get_all_routes(self) -> List[str]:
        return self.routes.get_all()

    @_not_found(list)
    def get_declared_routes(self) -> List[RouteInfo]:
        return self.routes.get_routes()

    @_not_found(list)
    def find_route_declaration(self, key: str) -> List[SiteHandle]:
        return self.routes.get_declaration(key)

    @_not_found(_empty)
    def get_route_path(self, key: str) -> str:
        return self.routes.get_path(key)

    @_not_found(lambda: "GET")
    def get_route_method(self, key: str) -> str:
        return self.routes.get_method(key)

    @_not_found(_false)
    def is_route(self, text: str) -> bool:
        return self.routes.is_known(text)

    @_not_found(_none)
    def describe_route(self, key: str) -> Optional[RouteDefinition]:
        return self.routes.describe(key)

    @_not_found(list)
    def get_route_domains(self) -> List[RouteDomainInfo]:
        return self.routes.domains()

    @_not_found(list)
    def get_route_usages(self, key: str) -> List[Usage]:
        """Usages recorded under the route's name and under its path."""
        route = self.routes.get(key)
        keys = [key]
        if route is not None:
            keys.extend(candidate for candidate in (route.name, route.path) if candidate)
        found: List[Usage] = []
        seen = set()
        for candidate in dict.fromkeys(keys):
            for usage in self.usages.get_usages(ArtifactKind.ROUTE, candidate):
                marker = (usage.file, usage.line_number, usage.usage_kind)
                if marker not in seen:
                    seen.add(marker)
                    found.append(usage)
        found.sort(key=lambda usage: (usage.file, usage.line_number, usage.site.offset))
        return found

    # -- translations -------------------------------------------------------

    @_not_found(list)
    def get_all_translations(self) -> List[str]:
        return self.translations.get_all()

    @_not_found(list)
    def find_translation_declarations(self, key: str) -> List[SiteHandle]:
        return self.translations.find_declarations(key)

    @_not_found(_empty)
    def get_translation_value(self, key: str) -> str:
        return self.translations.get_value(key)

    @_not_found(_empty)
    def get_translation_locale(self, key: str) -> str:
        return self.translations.get_locale(key)

    @_not_found(list)
    def get_translation_locales(self) -> List[str]:
        return self.translations.locales()

    @_not_found(_false)
    def is_translation(self, text: str) -> bool:
        return self.translations.is_known(text)

    @_not_found(list)
    def get_translation_usages(self, key: str) -> List[Usage]:
        return self.usages.get_usages(ArtifactKind.TRANSLATION, key)

    # -- views --------------------------------------------------------------

    @_not_found(list)
    def get_all_views(self) -> List[str]:
        return self.views.get_all()

    @_not_found(list)
    def find_view_declarations(self, name: str) -> List[SiteHandle]:
        return self.views.find_declarations(name)

    @_not_found(_empty)
    def get_view_path(self, key: str) -> str:
        return self.views.get_path(key)

    @_not_found(_false)
    def is_view(self, text: str) -> bool:
        return self.views.resolve(text) is not None

    @_not_found(list)
    def get_view_usages(self, name: str) -> List[Usage]:
        info = self.views.resolve(name)
        return self.usages.get_usages(ArtifactKind.VIEW, info.name if info is not None else name)

    # -- assets -------------------------------------------------------------

    @_not_found(list)
    def get_all_assets(self) -> List[str]:
        return self.assets.get_all()

    @_not_found(list)
    def find_asset_declaration(self, name: str) -> List[SiteHandle]:
        return self.assets.find_declarations(name)

    @_not_found(_empty)
    def get_asset_path(self, key: str) -> str:
        return self.assets.get_path(key)

    @_not_found(lambda: AssetType.OTHER)
    def get_asset_type(self, key: str) -> AssetType:
        return self.assets.get_type(key)

    @_not_found(_false)
    def is_asset(self, text: str) -> bool:
        return self.assets.resolve(text) is not None

    @_not_found(list)
    def get_asset_usages(self, name: str) -> List[Usage]:
        info = self.assets.resolve(name)
        return self.usages.get_usages(ArtifactKind.ASSET, info.name if info is not None else name)

    # -- cross-domain -------------------------------------------------------

    def get_usages(self, kind: ArtifactKind, key: str) -> List[Usage]:
        handlers = {
            ArtifactKind.ROUTE: self.get_route_usages,
            ArtifactKind.TRANSLATION: self.get_translation_usages,
            ArtifactKind.VIEW: self.get_view_usages,
            ArtifactKind.ASSET: self.get_asset_usages,
        }
        return handlers[kind](key)

    def find_declarations(self, kind: ArtifactKind, key: str) -> List[SiteHandle]:
        handlers = {
            ArtifactKind.ROUTE: self.find_route_declaration,
            ArtifactKind.TRANSLATION: self.find_translation_declarations,
            ArtifactKind.VIEW: self.find_view_declarations,
            ArtifactKind.ASSET: self.find_asset_declaration,
        }
        return handlers[kind](key)

    def classify(self, text: str) -> Optional[ArtifactKind]:
        """Artifact kind a bare key belongs to; routes are checked first."""
        if not text:
            return None
        if self.is_route(text):
            return ArtifactKind.ROUTE
        if self.is_translation(text):
            return ArtifactKind.TRANSLATION
        if self.is_view(text):
            return ArtifactKind.VIEW
        if self.is_asset(text):
            return ArtifactKind.ASSET
        return None


__all__ = ["ProjectIndex"]
