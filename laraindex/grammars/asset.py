"""Asset reference grammar."""

from __future__ import annotations

from typing import Dict, Set

from tree_sitter import Node

from ..syntax.php import array_position, enclosing_call, node_text

ASSET_FUNCTIONS = {"asset", "secure_asset", "mix", "vite", "elixir", "vite_asset"}
_FACADE_METHODS: Dict[str, Set[str]] = {
    "URL": {"asset", "secure", "assetFrom", "secureAssetFrom"},
    "url": {"asset", "secure", "assetFrom", "secureAssetFrom"},
    "Vite": {"asset", "content"},
}
_LIST_ARGUMENT_FUNCTIONS = {"vite"}

HTML_ASSET_ATTRIBUTES = ("src=", "href=", "data-src=", "data-background=", "content=", "data-vite")
_ATTRIBUTE_DEPTH = 5


def asset_reference(literal: Node) -> bool:
    """First positional argument of a recognised asset helper function or method."""
    found = enclosing_call(literal)
    in_list = False
    if found is None:
        position = array_position(literal)
        if position is None or position[1]:
            return False
        found = enclosing_call(position[0])
        in_list = True
        if found is None:
            return False
    site, index, argument_name = found
    if index != 0 or argument_name is not None:
        return False
    if site.kind == "function":
        if in_list:
            return site.name in _LIST_ARGUMENT_FUNCTIONS
        return site.name in ASSET_FUNCTIONS
    if site.kind == "static":
        methods = _FACADE_METHODS.get(site.bare_target or "", set())
        return site.name in methods and not in_list
    target = site.target or ""
    return not in_list and target.startswith("url(") and site.name in _FACADE_METHODS["URL"]


def html_asset_context(literal: Node) -> bool:
    """``literal`` sits near an HTML attribute that carries asset paths."""
    current = literal
    for _ in range(_ATTRIBUTE_DEPTH):
        current = current.parent
        if current is None:
            return False
        text = node_text(current)
        if any(marker in text for marker in HTML_ASSET_ATTRIBUTES):
            return True
    return False


__all__ = ["ASSET_FUNCTIONS", "HTML_ASSET_ATTRIBUTES", "asset_reference", "html_asset_context"]
