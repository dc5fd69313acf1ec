"""Translation declaration indexer."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tree_sitter import Node

from ..grammars.translation import is_language_file
from ..models import SiteHandle, TranslationInfo
from ..project import line_index
from ..syntax.php import (
    PhpDocument,
    array_entries,
    array_position,
    iter_string_literals,
    node_text,
    returned_expression,
    string_value,
)
from .base import Generation, Indexer

# Lenient "key": "value" scan; tolerates malformed JSON.
_JSON_ENTRY = re.compile(r'"([^"]+)"\s*:\s*"([^"]+)"')
_COMPLEX_VALUE = "[complex value]"
_DEFAULT_LOCALE = "en"


class TranslationGeneration(Generation[TranslationInfo]):
    def __init__(self) -> None:
        super().__init__()
        self.declarations: Dict[str, List[TranslationInfo]] = {}
        self.roots: List[Path] = []

    def add(self, info: TranslationInfo) -> None:
        # Last write wins across locales for single-key lookup.
        self.entries[info.key] = info
        self.declarations.setdefault(info.key, []).append(info)
        self.add_site(info.key, info.site)


class TranslationIndexer(Indexer[TranslationGeneration]):
    """Indexes array-return PHP language files and flat JSON locale files."""

    kind = "translation"

    def language_roots(self) -> List[Path]:
        """Conventional language directories that exist, in priority order."""
        tree = self.tree
        candidates = [
            tree.path("resources", "lang"),
            tree.path("lang"),
            tree.path("app", "lang"),
            tree.path("vendor", "laravel", "lang"),
        ]
        modules = tree.path("Modules")
        for module in tree.subdirectories(modules):
            candidates.append(module / "Resources" / "lang")
        candidates.extend(tree.subdirectories(tree.path("lang", "vendor")))
        candidates.extend(tree.path(extra) for extra in tree.config.translations.roots)

        roots: List[Path] = []
        for candidate in candidates:
            if candidate.is_dir() and candidate not in roots:
                roots.append(candidate)
        return roots

    def _build(self) -> TranslationGeneration:
        generation = TranslationGeneration()
        roots = self.language_roots()
        generation.roots = roots
        if not roots:
            self._scan_fallback(generation)
            return generation

        for root in roots:
            for child in self.tree.children(root):
                if child.is_dir():
                    if child.name == "vendor":
                        continue
                    self._scan_locale_directory(generation, child, child.name)
                elif child.suffix == ".json":
                    self._scan_json(generation, child, child.stem)
                elif child.suffix == ".php":
                    self._scan_php(generation, child, _DEFAULT_LOCALE, child.stem)
        return generation

    def _scan_locale_directory(self, generation: TranslationGeneration, directory: Path, locale: str) -> None:
        for path in self.tree.walk(directory, honor_excludes=False):
            if path.suffix != ".php":
                continue
            prefix = path.relative_to(directory).with_suffix("").as_posix()
            self._scan_php(generation, path, locale, prefix)

    def _scan_fallback(self, generation: TranslationGeneration) -> None:
        self.logger.debug("No language directory found; searching the project for language files")
        for path in self.tree.walk():
            relative = "/" + self.tree.relative(path)
            if path.suffix == ".php" and is_language_file(relative):
                self._scan_php(generation, path, path.parent.name, path.stem)
            elif path.suffix == ".json" and ("/lang/" in relative or "/translations/" in relative):
                self._scan_json(generation, path, path.stem)

    def _scan_php(self, generation: TranslationGeneration, path: Path, locale: str, prefix: str) -> None:
        document = self._parse(path)
        if document is None:
            return
        array = returned_expression(document.root)
        if array is None or array.type != "array_creation_expression":
            return
        try:
            self._collect(generation, document, array, locale, prefix, "")
        except Exception:  # noqa: BLE001 - a malformed language file never aborts the scan
            self.logger.debug("Skipping malformed language file %s", document.path, exc_info=True)

    def _collect(
        self,
        generation: TranslationGeneration,
        document: PhpDocument,
        array: Node,
        locale: str,
        prefix: str,
        path: str,
    ) -> None:
        stack: List[Tuple[Node, str]] = [(array, path)]
        while stack:
            current, current_path = stack.pop()
            nested: List[Tuple[Node, str]] = []
            for key_node, value in array_entries(current):
                key = string_value(key_node)
                if key is None:
                    continue
                full_path = f"{current_path}.{key}" if current_path else key
                if value.type == "array_creation_expression":
                    nested.append((value, full_path))
                    continue
                text = string_value(value)
                if text is None:
                    text = node_text(value) or _COMPLEX_VALUE
                translation_key = f"{prefix}.{full_path}" if prefix else full_path
                generation.add(
                    TranslationInfo(
                        key=translation_key,
                        locale=locale,
                        source_file=document.path,
                        value=text,
                        site=document.site(key_node),
                    )
                )
            stack.extend(reversed(nested))

    def _scan_json(self, generation: TranslationGeneration, path: Path, locale: str) -> None:
        text = self.tree.read_text(path)
        if text is None:
            return
        relative = self.tree.relative(path)
        for match in _JSON_ENTRY.finditer(text):
            generation.add(
                TranslationInfo(
                    key=match.group(1),
                    locale=locale,
                    source_file=relative,
                    value=match.group(2),
                    site=SiteHandle(
                        path=relative,
                        line=line_index(text, match.start()),
                        offset=match.start(1),
                        end=match.end(1),
                    ),
                )
            )

    # -- queries ------------------------------------------------------------

    def get(self, key: str) -> Optional[TranslationInfo]:
        return self.generation.entries.get(key)

    def get_value(self, key: str) -> str:
        info = self.get(key)
        return info.value if info is not None else ""

    def get_locale(self, key: str) -> str:
        info = self.get(key)
        return info.locale if info is not None else ""

    def declarations(self, key: str) -> List[TranslationInfo]:
        return list(self.generation.declarations.get(key, []))

    def locales(self) -> List[str]:
        seen: List[str] = []
        for infos in self.generation.declarations.values():
            for info in infos:
                if info.locale not in seen:
                    seen.append(info.locale)
        return sorted(seen)

    def find_declarations(self, key: str) -> List[SiteHandle]:
        """Locate the key literal of ``key`` in every locale, falling back to cached sites."""
        generation = self.generation
        namespace, _, remainder = key.partition(".")
        if not remainder:
            namespace, remainder = "", key
        sites: List[SiteHandle] = []
        for root in generation.roots:
            for child in self.tree.children(root):
                if child.is_dir() and namespace:
                    candidate = child / f"{namespace}.php"
                    if candidate.is_file():
                        sites.extend(self._key_sites(candidate, remainder))
                elif child.suffix == ".json":
                    sites.extend(self._json_key_sites(child, key))
        if not sites:
            sites = list(generation.sites.get(key, []))
        return _unique_sites(sites)

    def _key_sites(self, path: Path, remainder: str) -> List[SiteHandle]:
        document = self._parse(path)
        if document is None:
            return []
        found: List[SiteHandle] = []
        for literal in iter_string_literals(document.root):
            if string_value(literal) != remainder:
                continue
            position = array_position(literal)
            if position is not None and position[1]:
                found.append(document.site(literal))
        if found:
            return found
        nested = self._nested_key(returned_expression(document.root), remainder.split("."))
        return [document.site(nested)] if nested is not None else []

    def _nested_key(self, array: Optional[Node], segments: Sequence[str]) -> Optional[Node]:
        current = array
        key_node: Optional[Node] = None
        for segment in segments:
            if current is None or current.type != "array_creation_expression":
                return None
            for candidate, value in array_entries(current):
                if string_value(candidate) == segment:
                    key_node, current = candidate, value
                    break
            else:
                return None
        return key_node

    def _json_key_sites(self, path: Path, key: str) -> List[SiteHandle]:
        text = self.tree.read_text(path)
        if text is None:
            return []
        relative = self.tree.relative(path)
        pattern = re.compile('"' + re.escape(key) + r'"\s*:')
        return [
            SiteHandle(path=relative, line=line_index(text, match.start()), offset=match.start(), end=match.end())
            for match in pattern.finditer(text)
        ]


def _unique_sites(sites: Sequence[SiteHandle]) -> List[SiteHandle]:
    unique: List[SiteHandle] = []
    for site in sites:
        if site not in unique:
            unique.append(site)
    return unique


__all__ = ["TranslationGeneration", "TranslationIndexer"]
