"""Reference scanning across PHP, Blade and client-script files."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from tree_sitter import Node

from .grammars import (
    asset_reference,
    html_asset_context,
    in_translation_cache,
    language_key,
    route_declaration,
    route_reference,
    translation_reference,
    view_reference,
)
from .grammars.templates import (
    BLADE_ASSET_PATTERNS,
    BLADE_ROUTE_PATTERNS,
    BLADE_TRANSLATION_PATTERNS,
    BLADE_VIEW_PATTERNS,
    SCRIPT_ROUTE_PATTERNS,
    TextPattern,
    iter_matches,
)
from .indexers import AssetIndexer, RouteIndexer, TranslationIndexer, ViewIndexer
from .logging import get_logger, log_duration
from .models import ArtifactKind, SiteHandle, Usage, UsageKind
from .project import ProjectTree, is_blade, line_index
from .syntax.php import PhpDocument, PhpParser, iter_string_literals, string_value

_ROUTE_HINT_KINDS = {
    "url": UsageKind.URL_REFERENCE,
    "action": UsageKind.ACTION_REFERENCE,
}


@dataclass
class UsageIndex:
    """Reference sites per artifact kind, keyed by canonical key."""

    usages: Dict[ArtifactKind, Dict[str, List[Usage]]] = field(
        default_factory=lambda: {kind: {} for kind in ArtifactKind}
    )
    files_scanned: int = 0

    def get(self, kind: ArtifactKind, key: str) -> List[Usage]:
        return list(self.usages[kind].get(key, []))

    def keys(self, kind: ArtifactKind) -> List[str]:
        return list(self.usages[kind])

    def total(self) -> int:
        return sum(len(items) for by_key in self.usages.values() for items in by_key.values())


class _Recorder:
    """Collects usages for one scan, de-duplicated per (kind, key, usage kind, file, line)."""

    def __init__(self) -> None:
        self.index = UsageIndex()
        self._seen: Set[Tuple[ArtifactKind, str, UsageKind, str, int]] = set()

    def record(self, kind: ArtifactKind, key: str, usage_kind: UsageKind, site: SiteHandle) -> None:
        marker = (kind, key, usage_kind, site.path, site.line)
        if marker in self._seen:
            return
        self._seen.add(marker)
        usage = Usage(file=site.path, line_number=site.line, site=site, usage_kind=usage_kind)
        self.index.usages[kind].setdefault(key, []).append(usage)

    def finish(self) -> UsageIndex:
        for by_key in self.index.usages.values():
            for items in by_key.values():
                items.sort(key=lambda usage: (usage.file, usage.line_number, usage.site.offset))
        return self.index


# Handler for one text-pattern capture: (hint, key, site, recorder).
_TextHandler = Callable[[str, str, SiteHandle, _Recorder], None]


class UsageScanner:
    """Scans the project for references to indexed artifacts.

    Declaration caches are warmed first; each reference is resolved against
    them and recorded under the artifact's canonical key.
    """

    def __init__(
        self,
        tree: ProjectTree,
        parser: PhpParser,
        routes: RouteIndexer,
        translations: TranslationIndexer,
        views: ViewIndexer,
        assets: AssetIndexer,
    ) -> None:
        self.tree = tree
        self.parser = parser
        self.routes = routes
        self.translations = translations
        self.views = views
        self.assets = assets
        self.logger = get_logger("usages")
        self._lock = threading.Lock()
        self._index: Optional[UsageIndex] = None

    @property
    def index(self) -> UsageIndex:
        current = self._index
        if current is None:
            with self._lock:
                current = self._index
            if current is None:
                current = self.scan()
        return current

    def scan(self) -> UsageIndex:
        """Rebuild every usage map from source."""
        with self._lock:
            for indexer in (self.routes, self.translations, self.views, self.assets):
                indexer.warm()
            recorder = _Recorder()
            script_suffixes = tuple(suffix.lower() for suffix in self.tree.config.usages.script_extensions)
            with log_duration(self.logger, "usage scan"):
                for path in self.tree.walk():
                    name = path.name.lower()
                    if name.endswith(".php"):
                        self._scan_php(path, recorder)
                    elif name.endswith(script_suffixes):
                        self._scan_script(path, recorder)
                    else:
                        continue
                    recorder.index.files_scanned += 1
            index = recorder.finish()
            self._index = index
        self.logger.info(
            "Recorded %d usages across %d files", index.total(), index.files_scanned
        )
        return index

    def get_usages(self, kind: ArtifactKind, key: str) -> List[Usage]:
        return self.index.get(kind, key)

    # -- PHP and Blade ------------------------------------------------------

    def _scan_php(self, path: Path, recorder: _Recorder) -> None:
        text = self.tree.read_text(path)
        if text is None:
            return
        relative = self.tree.relative(path)
        try:
            document = self.parser.parse(text, relative)
        except (ValueError, RuntimeError) as exc:
            self.logger.debug("Failed to parse %s: %s", relative, exc)
            document = None
        if document is not None:
            for literal in iter_string_literals(document.root):
                try:
                    self._classify_literal(document, literal, recorder)
                except Exception:  # noqa: BLE001 - one malformed node never aborts the file
                    self.logger.debug(
                        "Skipping literal at %s:%d", relative, literal.start_point[0] + 1, exc_info=True
                    )
        if is_blade(path):
            self._scan_text(relative, text, recorder, blade=True)

    def _classify_literal(self, document: PhpDocument, literal: Node, recorder: _Recorder) -> None:
        text = string_value(literal)
        if not text or not text.strip():
            return
        if self.routes.is_declaration_literal(document.path, literal.start_byte):
            return
        site = document.site(literal)

        hint = route_reference(literal)
        if hint is not None:
            self._record_route(hint, text, site, recorder)
            return
        if route_declaration(literal, self.routes.facades):
            return
        if language_key(literal, document.path):
            return
        if translation_reference(literal):
            self._record_translation(text, site, recorder)
            return
        if view_reference(literal, self.routes.facades):
            self._record_view(text, site, recorder)
            return
        if asset_reference(literal):
            self._record_asset(text, site, recorder)
            return
        if html_asset_context(literal) and self.assets.resolve(text) is not None:
            self._record_asset(text, site, recorder)
            return
        if in_translation_cache(text, self.translations.generation.entries):
            self._record_translation(text, site, recorder)

    # -- text patterns ------------------------------------------------------

    def _scan_script(self, path: Path, recorder: _Recorder) -> None:
        text = self.tree.read_text(path)
        if text is None:
            return
        self._scan_text(self.tree.relative(path), text, recorder, blade=False)

    def _scan_text(self, relative: str, text: str, recorder: _Recorder, *, blade: bool) -> None:
        if blade:
            self._match(relative, text, BLADE_ROUTE_PATTERNS, recorder, self._record_route)
            self._match(relative, text, BLADE_TRANSLATION_PATTERNS, recorder, self._record_translation_hint)
            self._match(relative, text, BLADE_VIEW_PATTERNS, recorder, self._record_view_hint)
            self._match(relative, text, BLADE_ASSET_PATTERNS, recorder, self._record_asset_hint)
        else:
            self._match(relative, text, SCRIPT_ROUTE_PATTERNS, recorder, self._record_route)

    def _match(
        self,
        relative: str,
        text: str,
        patterns: Sequence[TextPattern],
        recorder: _Recorder,
        handler: _TextHandler,
    ) -> None:
        for pattern, key, start, end in iter_matches(patterns, text):
            site = SiteHandle(path=relative, line=line_index(text, start), offset=start, end=end)
            handler(pattern.hint, key, site, recorder)

    # -- recording ----------------------------------------------------------

    def _record_route(self, hint: str, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        routes = self.routes
        if hint == "action":
            route = routes.find_by_action(text)
            if route is not None:
                recorder.record(ArtifactKind.ROUTE, route.name or route.path, UsageKind.ACTION_REFERENCE, site)
            return
        if hint != "url":
            route = routes.generation.by_name.get(text)
            if route is not None:
                recorder.record(ArtifactKind.ROUTE, text, UsageKind.NAME_REFERENCE, site)
                return
        route = routes.find_by_path(text)
        if route is not None:
            usage_kind = _ROUTE_HINT_KINDS.get(hint, UsageKind.PATH_REFERENCE)
            recorder.record(ArtifactKind.ROUTE, route.path, usage_kind, site)

    def _record_translation(self, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        if self.translations.is_known(text):
            recorder.record(ArtifactKind.TRANSLATION, text, UsageKind.NAME_REFERENCE, site)

    def _record_translation_hint(self, hint: str, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        self._record_translation(text, site, recorder)

    def _record_view(self, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        info = self.views.resolve(text)
        if info is not None:
            recorder.record(ArtifactKind.VIEW, info.name, UsageKind.NAME_REFERENCE, site)

    def _record_view_hint(self, hint: str, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        self._record_view(text, site, recorder)

    def _record_asset(self, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        info = self.assets.resolve(text)
        if info is not None:
            recorder.record(ArtifactKind.ASSET, info.name, UsageKind.PATH_REFERENCE, site)

    def _record_asset_hint(self, hint: str, text: str, site: SiteHandle, recorder: _Recorder) -> None:
        self._record_asset(text, site, recorder)


__all__ = ["UsageIndex", "UsageScanner"]
