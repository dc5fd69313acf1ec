"""Route declaration indexer.

Route files are walked top-down once. Each ``Route::`` chain is either a
declaration (an HTTP verb call, optionally preceded by registrar calls such
as ``Route::middleware('auth')`` and followed by fluent modifiers such as
``->name('home')``) or a group (a chain ending in ``->group(closure)``).
Groups push a derived :class:`RouteGroupContext` onto the walk stack for
their closure body; the parent context is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from tree_sitter import Node

from ..grammars.route import REGISTRAR_ATTRIBUTES, ROUTE_MODIFIERS, ROUTE_VERBS, is_facade
from ..models import (
    ActionDefinition,
    MiddlewareDefinition,
    MiddlewareSource,
    RouteDefinition,
    RouteDomainInfo,
    RouteInfo,
    SiteHandle,
)
from ..normalize import (
    build_full_name,
    build_full_path,
    extract_domain_parameters,
    extract_parameters,
    normalize_domain,
    normalize_path,
    split_middleware,
)
from ..syntax.php import (
    CALL_TYPES,
    CallSite,
    PhpDocument,
    array_entries,
    call_chain,
    class_constant_name,
    closure_body,
    is_closure,
    keyed_entries,
    string_list,
    string_value,
)
from .base import Generation, Indexer

STANDARD_ROUTE_FILES = ("web.php", "api.php", "channels.php", "console.php", "artisan.php")

_MEMBER_CALLS = {"member_call_expression", "nullsafe_member_call_expression"}

_WHERE_SHORTCUTS = {
    "whereNumber": "[0-9]+",
    "whereAlpha": "[a-zA-Z]+",
    "whereAlphaNumeric": "[a-zA-Z0-9]+",
    "whereUuid": "[\\da-fA-F]{8}-[\\da-fA-F]{4}-[\\da-fA-F]{4}-[\\da-fA-F]{4}-[\\da-fA-F]{12}",
    "whereUlid": "[0-7][0-9a-hjkmnp-tv-zA-HJKMNP-TV-Z]{25}",
}


@dataclass(frozen=True)
class RouteGroupContext:
    """Scope inherited by declarations nested inside route groups."""

    prefix: str = ""
    domain: Optional[str] = None
    namespace: Optional[str] = None
    name_prefix: str = ""
    middleware: Tuple[str, ...] = ()
    controller: Optional[str] = None
    where: Tuple[Tuple[str, str], ...] = ()

    def derive(
        self,
        *,
        prefix: Optional[str] = None,
        domain: Optional[str] = None,
        namespace: Optional[str] = None,
        name: Optional[str] = None,
        middleware: Sequence[str] = (),
        controller: Optional[str] = None,
        where: Sequence[Tuple[str, str]] = (),
    ) -> "RouteGroupContext":
        return replace(
            self,
            prefix=build_full_path(prefix, self.prefix) if prefix else self.prefix,
            domain=domain if domain else self.domain,
            namespace=_join_namespace(self.namespace, namespace),
            name_prefix=(build_full_name(name, self.name_prefix) or self.name_prefix) if name else self.name_prefix,
            middleware=_unique(self.middleware + tuple(middleware)),
            controller=controller or self.controller,
            where=self.where + tuple(where),
        )


def _join_namespace(outer: Optional[str], inner: Optional[str]) -> Optional[str]:
    if not inner:
        return outer
    if inner.startswith("\\") or not outer:
        return inner.strip("\\")
    return outer.rstrip("\\") + "\\" + inner.strip("\\")


def _unique(values: Sequence[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def _namespaced(action: str, namespace: Optional[str]) -> str:
    if action.startswith("\\"):
        return action.lstrip("\\")
    if namespace:
        return f"{namespace}\\{action}"
    return action


class RouteGeneration(Generation[RouteInfo]):
    def __init__(self) -> None:
        super().__init__()
        self.by_name: Dict[str, RouteInfo] = {}
        self.by_path: Dict[str, RouteInfo] = {}
        self.actions: Dict[str, RouteInfo] = {}
        self.domains: Dict[str, RouteDomainInfo] = {}
        self.routes: List[RouteInfo] = []
        self.declaration_literals: Set[Tuple[str, int]] = set()

    def add(self, route: RouteInfo) -> None:
        self.routes.append(route)
        if route.name:
            self.by_name[route.name] = route
        if route.path:
            self.by_path[route.path] = route
        if route.controller and route.controller != "Closure":
            self.actions[route.controller] = route
            short = route.controller.rsplit("\\", 1)[-1]
            self.actions.setdefault(short, route)

    def finish(self) -> None:
        for name, route in self.by_name.items():
            self.entries[name] = route
            self.add_site(name, route.site)
        for path, route in self.by_path.items():
            if path not in self.entries:
                self.entries[path] = route
            self.add_site(path, route.site)

    def lookup(self, key: str) -> Optional[RouteInfo]:
        return self.by_name.get(key) or self.by_path.get(key)


@dataclass
class _Declaration:
    """Attributes gathered for one verb call before it is materialised."""

    own_middleware: List[str]
    where: List[Tuple[str, str]]
    name: Optional[str] = None
    name_node: Optional[Node] = None
    domain: Optional[str] = None


class RouteIndexer(Indexer[RouteGeneration]):
    """Indexes ``Route::`` declarations under ``routes/`` (and configured files)."""

    kind = "route"

    @property
    def facades(self) -> List[str]:
        return self.tree.config.routes.facades

    def route_files(self) -> List[Path]:
        files: List[Path] = []
        routes_dir = self.tree.path("routes")
        if routes_dir.is_dir():
            for filename in STANDARD_ROUTE_FILES:
                candidate = routes_dir / filename
                if candidate.is_file():
                    files.append(candidate)
            for child in self.tree.children(routes_dir):
                if child.is_file() and child.suffix == ".php" and child.name not in STANDARD_ROUTE_FILES:
                    files.append(child)
        for extra in self.tree.config.routes.files:
            candidate = self.tree.path(extra)
            if candidate.is_file() and candidate not in files:
                files.append(candidate)
        return files

    def _build(self) -> RouteGeneration:
        generation = RouteGeneration()
        for path in self.route_files():
            document = self._parse(path)
            if document is None:
                continue
            self._walk(document, generation)
        generation.finish()
        return generation

    # -- walk ---------------------------------------------------------------

    def _walk(self, document: PhpDocument, generation: RouteGeneration) -> None:
        stack: List[Tuple[Node, RouteGroupContext]] = [(document.root, RouteGroupContext())]
        while stack:
            node, context = stack.pop()
            if node.type in CALL_TYPES and _is_chain_head(node):
                try:
                    pushed = self._visit_chain(document, node, context, generation)
                except Exception:  # noqa: BLE001 - one malformed chain never aborts the file
                    self.logger.debug(
                        "Skipping malformed route chain in %s:%d",
                        document.path,
                        node.start_point[0] + 1,
                        exc_info=True,
                    )
                    pushed = None
                if pushed is not None:
                    stack.extend(reversed(pushed))
                    continue
            stack.extend((child, context) for child in reversed(node.children))

    def _visit_chain(
        self,
        document: PhpDocument,
        node: Node,
        context: RouteGroupContext,
        generation: RouteGeneration,
    ) -> Optional[List[Tuple[Node, RouteGroupContext]]]:
        """Handle one facade chain; returns the nodes to walk next or ``None`` to descend normally."""
        chain = call_chain(node)
        if not chain or not is_facade(chain[0], self.facades):
            return None

        for index, site in enumerate(chain):
            if site.name.lower() in ROUTE_VERBS:
                if not all(call.name in REGISTRAR_ATTRIBUTES for call in chain[:index]):
                    return []
                self._declare(document, chain[:index], site, chain[index + 1 :], context, generation)
                return []

        last = chain[-1]
        if last.name == "group" and all(call.name in REGISTRAR_ATTRIBUTES for call in chain[:-1]):
            return self._group(document, chain[:-1], last, context, generation)
        return []

    # -- groups -------------------------------------------------------------

    def _group(
        self,
        document: PhpDocument,
        registrars: Sequence[CallSite],
        group: CallSite,
        context: RouteGroupContext,
        generation: RouteGeneration,
    ) -> List[Tuple[Node, RouteGroupContext]]:
        derived = context
        for call in registrars:
            derived = self._apply_registrar(derived, call, own_middleware=None)
        callback: Optional[Node] = None
        for argument in group.arguments:
            if is_closure(argument.value):
                callback = argument.value
            elif argument.value.type == "array_creation_expression":
                derived = self._apply_group_array(derived, argument.value)

        if derived.domain and derived.domain != context.domain:
            self._register_domain(generation, derived.domain, document.site(group.node), derived.middleware)

        if callback is None:
            return []
        body = closure_body(callback)
        return [(body, derived)] if body is not None else []

    def _apply_group_array(self, context: RouteGroupContext, array: Node) -> RouteGroupContext:
        attributes = dict(keyed_entries(array))
        where: List[Tuple[str, str]] = []
        for key, value in keyed_entries(attributes.get("where")):
            pattern = string_value(value)
            if pattern is not None:
                where.append((key, pattern))
        controller_node = attributes.get("controller")
        return context.derive(
            prefix=string_value(attributes.get("prefix")),
            domain=string_value(attributes.get("domain")),
            namespace=string_value(attributes.get("namespace")),
            name=string_value(attributes.get("as")) or string_value(attributes.get("name")),
            middleware=string_list(attributes.get("middleware")),
            controller=class_constant_name(controller_node) or string_value(controller_node),
            where=where,
        )

    def _apply_registrar(
        self,
        context: RouteGroupContext,
        call: CallSite,
        *,
        own_middleware: Optional[List[str]],
    ) -> RouteGroupContext:
        """Apply one registrar call; middleware goes to ``own_middleware`` when given."""
        argument = call.argument(0)
        if call.name == "prefix":
            return context.derive(prefix=string_value(argument))
        if call.name in ("name", "as"):
            return context.derive(name=string_value(argument))
        if call.name == "domain":
            return context.derive(domain=string_value(argument))
        if call.name == "namespace":
            return context.derive(namespace=string_value(argument))
        if call.name == "controller":
            return context.derive(controller=class_constant_name(argument) or string_value(argument))
        if call.name == "middleware":
            middleware = _middleware_arguments(call)
            if own_middleware is not None:
                own_middleware.extend(middleware)
                return context
            return context.derive(middleware=middleware)
        if call.name == "where":
            return context.derive(where=_where_pairs(call))
        return context

    def _register_domain(
        self,
        generation: RouteGeneration,
        domain: str,
        site: SiteHandle,
        middleware: Sequence[str],
    ) -> None:
        normalized = normalize_domain(domain)
        if not normalized:
            return
        generation.domains[normalized] = RouteDomainInfo(
            domain=normalized,
            site=site,
            parameters=tuple(extract_domain_parameters(domain)),
            middleware=tuple(middleware),
        )

    # -- declarations -------------------------------------------------------

    def _declare(
        self,
        document: PhpDocument,
        registrars: Sequence[CallSite],
        verb: CallSite,
        modifiers: Sequence[CallSite],
        context: RouteGroupContext,
        generation: RouteGeneration,
    ) -> None:
        declaration = _Declaration(own_middleware=[], where=[])
        scoped = context
        for call in registrars:
            scoped = self._apply_registrar(scoped, call, own_middleware=declaration.own_middleware)
        for call in modifiers:
            if call.name not in ROUTE_MODIFIERS:
                continue
            argument = call.argument(0)
            if call.name in ("name", "as") and declaration.name is None:
                declaration.name = string_value(argument)
                declaration.name_node = argument if declaration.name is not None else None
            elif call.name == "middleware":
                declaration.own_middleware.extend(_middleware_arguments(call))
            elif call.name == "withoutMiddleware":
                excluded = set(_middleware_arguments(call))
                declaration.own_middleware = [item for item in declaration.own_middleware if item not in excluded]
            elif call.name == "domain":
                declaration.domain = string_value(argument)
            else:
                declaration.where.extend(_where_pairs(call))

        verb_name = verb.name.lower()
        if verb_name == "match":
            methods = [item.upper() for item in string_list(verb.argument(0, "methods"))]
            method = "|".join(methods) or "GET"
            path_node = verb.argument(1, "uri")
            action_node = verb.argument(2, "action")
        else:
            method = "ANY" if verb_name == "any" else verb_name.upper()
            path_node = verb.argument(0, "uri")
            action_node = verb.argument(1, "action")

        raw_path = string_value(path_node)
        if raw_path is None:
            uri = dict(keyed_entries(path_node))
            raw_path = string_value(uri.get("uri")) or string_value(uri.get("path")) or ""
        elif path_node is not None:
            generation.declaration_literals.add((document.path, path_node.start_byte))

        controller, as_name, as_node, action_middleware = self._action(action_node, scoped)
        if declaration.name is None and as_name is not None:
            declaration.name, declaration.name_node = as_name, as_node
        declaration.own_middleware.extend(action_middleware)

        name_site: Optional[SiteHandle] = None
        if declaration.name_node is not None:
            name_site = document.site(declaration.name_node)
            generation.declaration_literals.add((document.path, declaration.name_node.start_byte))

        where = dict(scoped.where)
        where.update(declaration.where)
        full_path = build_full_path(raw_path, scoped.prefix)
        domain = declaration.domain or scoped.domain
        route = RouteInfo(
            name=build_full_name(declaration.name, scoped.name_prefix),
            method=method,
            path=full_path,
            controller=controller,
            middleware=_unique(scoped.middleware + tuple(declaration.own_middleware)),
            site=document.site(verb.node),
            parameters=tuple(extract_parameters(full_path, where)),
            domain=domain,
            domain_parameters=tuple(extract_domain_parameters(domain)) if domain else (),
            group_prefix=scoped.prefix,
            group_middleware=scoped.middleware,
            where=where,
            name_site=name_site,
        )
        if declaration.domain:
            self._register_domain(generation, declaration.domain, route.site, route.middleware)
        generation.add(route)

    def _action(
        self, node: Optional[Node], context: RouteGroupContext
    ) -> Tuple[Optional[str], Optional[str], Optional[Node], List[str]]:
        """Resolve an action argument to ``(controller, as-name, as-node, middleware)``."""
        if node is None:
            return None, None, None, []
        if is_closure(node):
            return "Closure", None, None, []
        literal = string_value(node)
        if literal is not None:
            if "@" not in literal and context.controller:
                return f"{context.controller}@{literal}", None, None, []
            return _namespaced(literal, context.namespace), None, None, []
        class_name = class_constant_name(node)
        if class_name is not None:
            return class_name.lstrip("\\"), None, None, []

        entries = array_entries(node)
        if not entries:
            return None, None, None, []
        if len(entries) == 2 and all(key is None for key, _ in entries):
            target, method_node = entries[0][1], entries[1][1]
            method = string_value(method_node)
            class_name = class_constant_name(target)
            if class_name is None:
                target_literal = string_value(target)
                class_name = _namespaced(target_literal, context.namespace) if target_literal else None
            if class_name is not None and method is not None:
                return class_name.lstrip("\\") + "@" + method, None, None, []
            return None, None, None, []

        controller: Optional[str] = None
        as_name: Optional[str] = None
        as_node: Optional[Node] = None
        middleware: List[str] = []
        for key, value in entries:
            key_text = string_value(key) if key is not None else None
            if key_text == "uses" or (key is None and is_closure(value)):
                controller = self._action(value, context)[0]
            elif key_text == "as":
                as_name = string_value(value)
                as_node = value if as_name is not None else None
            elif key_text == "middleware":
                middleware.extend(string_list(value))
        return controller, as_name, as_node, middleware

    # -- queries ------------------------------------------------------------

    def get(self, key: str) -> Optional[RouteInfo]:
        return self.generation.lookup(key)

    def is_known(self, text: str) -> bool:
        return self.generation.lookup(text) is not None

    def get_all(self) -> List[str]:
        generation = self.generation
        keys = list(generation.by_name)
        keys.extend(path for path in generation.by_path if path not in generation.by_name)
        return keys

    def get_routes(self) -> List[RouteInfo]:
        """One entry per declaration site, in declaration order."""
        return list(self.generation.routes)

    def get_declaration(self, key: str) -> List[SiteHandle]:
        generation = self.generation
        sites: List[SiteHandle] = []
        for route in (generation.by_name.get(key), generation.by_path.get(key)):
            if route is not None and route.site not in sites:
                sites.append(route.site)
        return sites

    def get_method(self, key: str) -> str:
        route = self.get(key)
        return route.method if route is not None else "GET"

    def get_path(self, key: str) -> str:
        route = self.get(key)
        return route.path if route is not None else key

    def find_by_path(self, path: str) -> Optional[RouteInfo]:
        generation = self.generation
        return generation.by_path.get(path) or generation.by_path.get(normalize_path(path))

    def find_by_action(self, action: str) -> Optional[RouteInfo]:
        actions = self.generation.actions
        cleaned = action.lstrip("\\")
        return actions.get(cleaned) or actions.get(cleaned.rsplit("\\", 1)[-1])

    def domains(self) -> List[RouteDomainInfo]:
        return list(self.generation.domains.values())

    def is_declaration_literal(self, path: str, offset: int) -> bool:
        return (path, offset) in self.generation.declaration_literals

    def describe(self, key: str) -> Optional[RouteDefinition]:
        """Expanded definition of a route looked up by name, then by path."""
        route = self.get(key)
        if route is None:
            return None
        group = set(route.group_middleware)
        middleware: List[MiddlewareDefinition] = []
        for item in route.middleware:
            if item in group:
                continue
            name, parameters = split_middleware(item)
            middleware.append(MiddlewareDefinition(name, parameters, MiddlewareSource.ROUTE))
        for item in route.group_middleware:
            name, parameters = split_middleware(item)
            middleware.append(MiddlewareDefinition(name, parameters, MiddlewareSource.GROUP))
        return RouteDefinition(
            name=route.name,
            method=route.method,
            uri=route.path,
            action=_action_definition(route.controller),
            middleware=tuple(middleware),
            parameters=route.parameters,
            domain=route.domain,
            prefix=route.group_prefix,
            where=dict(route.where),
        )


def _action_definition(controller: Optional[str]) -> ActionDefinition:
    if controller is None:
        return ActionDefinition(controller=None, method=None, namespace=None, is_closure=False)
    if controller == "Closure":
        return ActionDefinition(controller=None, method=None, namespace=None, is_closure=True)
    class_part, _, method = controller.partition("@")
    namespace, _, short = class_part.rpartition("\\")
    return ActionDefinition(
        controller=short or None,
        method=method or None,
        namespace=namespace or None,
        is_closure=False,
    )


def _is_chain_head(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type not in _MEMBER_CALLS:
        return True
    receiver = parent.child_by_field_name("object")
    return receiver is None or receiver.id != node.id


def _middleware_arguments(call: CallSite) -> List[str]:
    values: List[str] = []
    for argument in call.arguments:
        values.extend(string_list(argument.value))
    return values


def _where_pairs(call: CallSite) -> List[Tuple[str, str]]:
    first = call.argument(0)
    if call.name in _WHERE_SHORTCUTS:
        return [(name, _WHERE_SHORTCUTS[call.name]) for name in string_list(first)]
    if call.name == "whereIn":
        name = string_value(first)
        values = string_list(call.argument(1))
        return [(name, "|".join(values))] if name and values else []
    pairs: List[Tuple[str, str]] = []
    name = string_value(first)
    if name is not None:
        pattern = string_value(call.argument(1))
        if pattern is not None:
            pairs.append((name, pattern))
        return pairs
    for key, value in keyed_entries(first):
        pattern = string_value(value)
        if pattern is not None:
            pairs.append((key, pattern))
    return pairs


__all__ = ["RouteGeneration", "RouteGroupContext", "RouteIndexer", "STANDARD_ROUTE_FILES"]
