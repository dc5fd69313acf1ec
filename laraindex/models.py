"""Core data models shared across laraindex components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class ArtifactKind(str, Enum):
    """The four artifact domains the index understands."""

    ROUTE = "route"
    TRANSLATION = "translation"
    VIEW = "view"
    ASSET = "asset"


class UsageKind(str, Enum):
    """How a reference site points at its artifact."""

    NAME_REFERENCE = "name"
    PATH_REFERENCE = "path"
    ACTION_REFERENCE = "action"
    URL_REFERENCE = "url"


class AssetType(str, Enum):
    CSS = "css"
    JS = "js"
    IMAGE = "image"
    FONT = "font"
    OTHER = "other"


class MiddlewareSource(str, Enum):
    ROUTE = "route"
    GROUP = "group"


@dataclass(frozen=True)
class SiteHandle:
    """A location inside a project file.

    ``path`` is relative to the project root (POSIX separators), ``line`` is
    0-based and ``offset``/``end`` delimit the site in the file.
    """

    path: str
    line: int
    offset: int = 0
    end: int = 0


@dataclass(frozen=True)
class RouteParameter:
    """A ``{name}`` segment of a resolved route path."""

    name: str
    inferred_type: str
    optional: bool
    constraint_pattern: Optional[str] = None


@dataclass(frozen=True)
class DomainParameter:
    name: str
    optional: bool = False
    pattern: Optional[str] = None
    default: Optional[str] = None


@dataclass(frozen=True)
class MiddlewareDefinition:
    name: str
    parameters: Tuple[str, ...]
    source: MiddlewareSource


@dataclass(frozen=True)
class RouteInfo:
    """One resolved route declaration.

    A declaration site owns exactly one instance; the name and path caches
    may both point at it.
    """

    name: Optional[str]
    method: str
    path: str
    controller: Optional[str]
    middleware: Tuple[str, ...]
    site: SiteHandle
    parameters: Tuple[RouteParameter, ...] = ()
    domain: Optional[str] = None
    domain_parameters: Tuple[DomainParameter, ...] = ()
    group_prefix: str = ""
    group_middleware: Tuple[str, ...] = ()
    where: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    name_site: Optional[SiteHandle] = None


@dataclass(frozen=True)
class RouteDomainInfo:
    domain: str
    site: SiteHandle
    parameters: Tuple[DomainParameter, ...]
    middleware: Tuple[str, ...]


@dataclass(frozen=True)
class ActionDefinition:
    controller: Optional[str]
    method: Optional[str]
    namespace: Optional[str]
    is_closure: bool


@dataclass(frozen=True)
class RouteDefinition:
    """Expanded, presentation-friendly description of a route."""

    name: Optional[str]
    method: str
    uri: str
    action: ActionDefinition
    middleware: Tuple[MiddlewareDefinition, ...]
    parameters: Tuple[RouteParameter, ...]
    domain: Optional[str]
    prefix: str
    where: Dict[str, str]


@dataclass(frozen=True)
class TranslationInfo:
    key: str
    locale: str
    source_file: str
    value: str
    site: SiteHandle


@dataclass(frozen=True)
class ViewInfo:
    """A template file; indexed under several aliases of ``name``."""

    name: str
    path: str
    extension: str
    root: str

    @property
    def file(self) -> str:
        return f"{self.root}/{self.path}" if self.root else self.path


@dataclass(frozen=True)
class AssetInfo:
    name: str
    path: str
    extension: str
    type: AssetType
    file: str


@dataclass(frozen=True)
class Usage:
    """A reference site of an artifact key."""

    file: str
    line_number: int
    site: SiteHandle
    usage_kind: UsageKind


__all__ = [
    "ActionDefinition",
    "ArtifactKind",
    "AssetInfo",
    "AssetType",
    "DomainParameter",
    "MiddlewareDefinition",
    "MiddlewareSource",
    "RouteDefinition",
    "RouteDomainInfo",
    "RouteInfo",
    "RouteParameter",
    "SiteHandle",
    "TranslationInfo",
    "Usage",
    "UsageKind",
    "ViewInfo",
]
