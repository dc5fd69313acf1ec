"""Translation reference grammar."""

from __future__ import annotations

from typing import Container, Optional

from tree_sitter import Node

from ..syntax.php import CallSite, array_position, enclosing_call

TRANSLATION_FUNCTIONS = {
    "trans",
    "__",
    "trans_choice",
    "lang",
    "__t",
    "_",
    "localize",
    "translate",
}
TRANSLATION_METHODS = {"get", "choice", "trans", "__", "transChoice"}
TRANSLATION_RECEIVERS = {
    "Lang",
    "Trans",
    "Translator",
    "app",
    "translator",
    "I18n",
    "TranslatorContract",
    "Localization",
}


def _receiver_name(site: CallSite) -> Optional[str]:
    if site.kind == "static":
        return site.bare_target
    target = (site.target or "").strip()
    if target.startswith("app(") and "translator" in target:
        return "app"
    return target.rsplit("->", 1)[-1].lstrip("$") or None


def is_translation_call(site: CallSite) -> bool:
    if site.kind == "function":
        return site.name in TRANSLATION_FUNCTIONS
    if site.name not in TRANSLATION_METHODS:
        return False
    receiver = _receiver_name(site)
    if receiver is None:
        return False
    return receiver in TRANSLATION_RECEIVERS or (site.target or "").endswith("\\Translator")


def translation_reference(literal: Node) -> bool:
    """First positional argument of a recognised translation function or method."""
    found = enclosing_call(literal)
    if found is None:
        return False
    site, index, argument_name = found
    if index != 0 or argument_name not in (None, "key"):
        return False
    return is_translation_call(site)


def is_language_file(path: str) -> bool:
    """Whether a project-relative path sits under a conventional language directory."""
    normalized = "/" + path.replace("\\", "/").lstrip("/")
    return "/lang/" in normalized


def language_key(literal: Node, path: str) -> bool:
    """Array-key literal inside a language file."""
    if not is_language_file(path):
        return False
    position = array_position(literal)
    return position is not None and position[1]


def in_translation_cache(text: str, cache: Container[str]) -> bool:
    """Last-resort check: ``text`` is a known translation key."""
    return bool(text) and not text.isdigit() and text in cache


__all__ = [
    "TRANSLATION_FUNCTIONS",
    "TRANSLATION_METHODS",
    "TRANSLATION_RECEIVERS",
    "in_translation_cache",
    "is_language_file",
    "is_translation_call",
    "language_key",
    "translation_reference",
]
