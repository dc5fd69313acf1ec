"""Route declaration and reference grammar."""

from __future__ import annotations

from typing import Collection, Optional

from tree_sitter import Node

from ..syntax.php import (
    CallSite,
    array_entries,
    array_position,
    call_chain,
    class_constant_name,
    enclosing_call,
)

ROUTE_VERBS = ("get", "post", "put", "patch", "delete", "options", "any", "match")

# Registrar calls that may precede a verb or ``group`` in a facade chain.
REGISTRAR_ATTRIBUTES = {
    "prefix",
    "name",
    "as",
    "middleware",
    "withoutMiddleware",
    "domain",
    "namespace",
    "controller",
    "where",
    "scopeBindings",
    "withoutScopedBindings",
}

# Fluent modifiers that may follow a verb declaration.
ROUTE_MODIFIERS = {
    "name",
    "as",
    "middleware",
    "withoutMiddleware",
    "domain",
    "where",
    "whereNumber",
    "whereAlpha",
    "whereAlphaNumeric",
    "whereUuid",
    "whereUlid",
    "whereIn",
}

# Route facade methods whose first argument is a URI.
_URI_DECLARATIONS = set(ROUTE_VERBS) | {
    "resource",
    "apiResource",
    "singleton",
    "apiSingleton",
    "view",
    "redirect",
    "permanentRedirect",
    "fallback",
}

NAME_HELPERS = {"route", "to_route"}
URL_HELPERS = {"url"}
ACTION_HELPERS = {"action"}
_NAME_METHODS = {"route", "signedRoute", "temporarySignedRoute"}
_URL_RECEIVERS = {"URL", "Redirect"}


def is_facade(site: CallSite, facades: Collection[str]) -> bool:
    """A static call on the routing facade (``Route::`` or a qualified ``\\...\\Route::``)."""
    return site.kind == "static" and site.bare_target in facades


def chain_root_is_facade(site: CallSite, facades: Collection[str]) -> bool:
    chain = call_chain(site.node)
    return bool(chain) and is_facade(chain[0], facades)


def controller_method_slot(literal: Node) -> bool:
    """True for ``'index'`` in ``[UserController::class, 'index']``."""
    position = array_position(literal)
    if position is None:
        return False
    array, is_key, index = position
    if is_key or index != 1:
        return False
    entries = array_entries(array)
    if len(entries) != 2 or any(key is not None for key, _ in entries):
        return False
    return class_constant_name(entries[0][1]) is not None


def route_reference(literal: Node) -> Optional[str]:
    """Classify ``literal`` as the key argument of a route helper.

    Returns ``"name"`` for ``route()``-style helpers, ``"url"`` for
    ``url()``/``URL::to()`` and ``"action"`` for ``action()``; ``None``
    when the literal is not a route reference.
    """
    if controller_method_slot(literal):
        return None
    found = enclosing_call(literal)
    if found is None:
        return None
    site, index, argument_name = found
    if index != 0 or argument_name is not None:
        return None
    if site.kind == "function":
        if site.name in NAME_HELPERS:
            return "name"
        if site.name in URL_HELPERS:
            return "url"
        if site.name in ACTION_HELPERS:
            return "action"
        return None
    if site.name in _NAME_METHODS:
        return "name"
    receiver = (site.bare_target if site.kind == "static" else site.target) or ""
    if site.name == "action" and (receiver in _URL_RECEIVERS or receiver.startswith(("redirect(", "url("))):
        return "action"
    if site.name == "to" and (receiver in _URL_RECEIVERS or receiver.startswith(("redirect(", "url("))):
        return "url"
    return None


def route_declaration(literal: Node, facades: Collection[str]) -> bool:
    """True when ``literal`` declares a route: a URI argument or a chained ``->name()``."""
    if controller_method_slot(literal):
        return False
    found = enclosing_call(literal)
    if found is None:
        return False
    site, index, _ = found
    if site.name in ("name", "as") and site.kind == "method":
        return chain_root_is_facade(site, facades)
    if site.name not in _URI_DECLARATIONS or not chain_root_is_facade(site, facades):
        return False
    if site.name == "match":
        return index == 1
    return index == 0


__all__ = [
    "ACTION_HELPERS",
    "NAME_HELPERS",
    "REGISTRAR_ATTRIBUTES",
    "ROUTE_MODIFIERS",
    "ROUTE_VERBS",
    "URL_HELPERS",
    "chain_root_is_facade",
    "controller_method_slot",
    "is_facade",
    "route_declaration",
    "route_reference",
]
