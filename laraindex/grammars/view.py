"""View reference grammar."""

from __future__ import annotations

from typing import Collection, Dict, Optional, Tuple

from tree_sitter import Node

from ..syntax.php import CallSite, array_position, enclosing_call

VIEW_FUNCTIONS = {"view", "markdown", "render", "renderView"}

# Facade methods and the positional index of their view argument.
_FACADE_METHODS: Dict[str, Dict[str, int]] = {
    "View": {
        "make": 0,
        "first": 0,
        "exists": 0,
        "composer": 0,
        "creator": 0,
        "renderWhen": 1,
        "renderUnless": 1,
    },
    "Blade": {"render": 0, "renderComponent": 0, "compile": 0},
    "Response": {"view": 0},
}

# Instance methods on any receiver (``response()->view()``, mailables).
_INSTANCE_METHODS = {"view": 0, "markdown": 0, "text": 0}
_INSTANCE_RECEIVERS = ("response(", "$this", "$message", "$mail", "(new MailMessage")

_LIST_ARGUMENT_METHODS = {"first", "composer", "creator"}


def _slot(literal: Node) -> Optional[Tuple[CallSite, int, bool]]:
    """Enclosing call of ``literal``, looking through one list-array level."""
    found = enclosing_call(literal)
    if found is not None:
        site, index, argument_name = found
        if argument_name is not None and argument_name != "view":
            return None
        return site, index, False
    position = array_position(literal)
    if position is None or position[1]:
        return None
    array = position[0]
    found = enclosing_call(array)
    if found is None:
        return None
    site, index, _ = found
    return site, index, True


def _expected_index(site: CallSite) -> Optional[int]:
    if site.kind == "function":
        return 0 if site.name in VIEW_FUNCTIONS else None
    if site.kind == "static":
        methods = _FACADE_METHODS.get(site.bare_target or "")
        return methods.get(site.name) if methods else None
    target = site.target or ""
    if site.name in _INSTANCE_METHODS and target.startswith(_INSTANCE_RECEIVERS):
        return _INSTANCE_METHODS[site.name]
    return None


def view_reference(literal: Node, facades: Collection[str] = ("Route",)) -> bool:
    """The view argument of a recognised view-rendering function or method."""
    slot = _slot(literal)
    if slot is None:
        return False
    site, index, in_list = slot
    if site.kind == "static" and site.bare_target in facades and site.name == "view":
        return index == 1 and not in_list
    expected = _expected_index(site)
    if expected is None or index != expected:
        return False
    if in_list:
        return site.name in _LIST_ARGUMENT_METHODS
    return True


__all__ = ["VIEW_FUNCTIONS", "view_reference"]
