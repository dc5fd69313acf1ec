"""Canonical key forms for routes, views and assets."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, List, Mapping, Optional, Tuple

from .models import AssetType, DomainParameter, RouteParameter

_BRACE_PARAMETER = re.compile(r"\{([^{}]+?)(\?)?\}")
_SLASHES = re.compile(r"/+")
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_UUID_SHAPE = re.compile(r"\[0-9a-f\]\{8\}", re.IGNORECASE)

_ASSET_TYPES: Dict[str, AssetType] = {
    "css": AssetType.CSS,
    "scss": AssetType.CSS,
    "sass": AssetType.CSS,
    "less": AssetType.CSS,
    "js": AssetType.JS,
    "ts": AssetType.JS,
    "jsx": AssetType.JS,
    "tsx": AssetType.JS,
    "jpg": AssetType.IMAGE,
    "jpeg": AssetType.IMAGE,
    "png": AssetType.IMAGE,
    "gif": AssetType.IMAGE,
    "svg": AssetType.IMAGE,
    "webp": AssetType.IMAGE,
    "ico": AssetType.IMAGE,
    "ttf": AssetType.FONT,
    "woff": AssetType.FONT,
    "woff2": AssetType.FONT,
    "eot": AssetType.FONT,
}
_OTHER_ASSET_EXTENSIONS = {"pdf", "json"}

TEMPLATE_SUFFIXES = (".blade.php", ".php")


def normalize_path(path: str) -> str:
    """Return a route path with exactly one leading slash and no repeated slashes."""
    trimmed = _SLASHES.sub("/", (path or "").strip()).strip("/")
    if not trimmed:
        return "/"
    return f"/{trimmed}"


def build_full_path(path: str, prefix: str) -> str:
    """Prepend an inherited group ``prefix`` to a route's own ``path``."""
    own = (path or "").strip("/")
    inherited = (prefix or "").strip("/")
    if inherited and own:
        return normalize_path(f"{inherited}/{own}")
    return normalize_path(inherited or own)


def build_full_name(name: Optional[str], prefix: str) -> Optional[str]:
    """Dot-join an inherited name prefix with a route's own name.

    Empty segments are suppressed, so ``admin.`` + ``users`` and ``admin`` +
    ``.users`` both resolve to ``admin.users``.
    """
    if name is None:
        return None
    segments = [part for part in (prefix or "").split(".") if part]
    segments.extend(part for part in name.split(".") if part)
    if not segments:
        return None
    return ".".join(segments)


def infer_parameter_type(name: str, pattern: Optional[str] = None) -> str:
    """Best-effort type of a route parameter from its constraint, then its name."""
    if pattern:
        if pattern in {r"\d+", "[0-9]+"}:
            return "integer"
        if pattern == r"\w+":
            return "string"
        if "uuid" in pattern.lower() or _UUID_SHAPE.search(pattern):
            return "uuid"
        if "[0-9a-fA-F]" in pattern:
            return "hex"
        if pattern == "^[A-Z]{2}$" or pattern == "[A-Z]{2}":
            return "alpha"
    lowered = name.lower()
    if lowered == "id" or name.endswith("_id") or name.endswith("Id"):
        return "integer"
    if lowered == "uuid" or lowered.endswith("_uuid"):
        return "uuid"
    if lowered == "slug" or lowered.endswith("_slug"):
        return "slug"
    if "date" in lowered:
        return "date"
    if "time" in lowered:
        return "datetime"
    for kind in ("email", "phone", "url"):
        if kind in lowered:
            return kind
    return "string"


def _split_parameter(body: str) -> Tuple[str, Optional[str]]:
    name, _, pattern = body.partition(":")
    return name.strip(), (pattern.strip() or None)


def extract_parameters(path: str, where: Optional[Mapping[str, str]] = None) -> List[RouteParameter]:
    """Return ``{name}``, ``{name?}`` and ``{name:pattern}`` segments of ``path`` in order."""
    constraints = where or {}
    parameters: List[RouteParameter] = []
    for match in _BRACE_PARAMETER.finditer(path or ""):
        name, pattern = _split_parameter(match.group(1))
        if not name:
            continue
        pattern = pattern or constraints.get(name)
        parameters.append(
            RouteParameter(
                name=name,
                inferred_type=infer_parameter_type(name, pattern),
                optional=match.group(2) is not None,
                constraint_pattern=pattern,
            )
        )
    return parameters


def extract_domain_parameters(domain: str) -> List[DomainParameter]:
    """Parse ``{tenant}``/``{tenant?}``/``{tenant:pattern:default}`` segments of a domain."""
    parameters: List[DomainParameter] = []
    for match in _BRACE_PARAMETER.finditer(domain or ""):
        parts = match.group(1).split(":")
        name = parts[0].strip()
        if not name:
            continue
        parameters.append(
            DomainParameter(
                name=name,
                optional=match.group(2) is not None,
                pattern=parts[1] if len(parts) > 1 and parts[1] else None,
                default=parts[2] if len(parts) > 2 and parts[2] else None,
            )
        )
    return parameters


def normalize_domain(domain: str) -> str:
    return _SCHEME.sub("", (domain or "").strip()).rstrip("/")


def split_middleware(value: str) -> Tuple[str, Tuple[str, ...]]:
    """``throttle:60,1`` -> ``("throttle", ("60", "1"))``."""
    name, _, arguments = value.partition(":")
    parameters = tuple(part.strip() for part in arguments.split(",") if part.strip())
    return name.strip(), parameters


def strip_template_suffix(filename: str) -> Tuple[str, str]:
    """Split ``index.blade.php`` into ``("index", "blade.php")``."""
    lowered = filename.lower()
    for suffix in TEMPLATE_SUFFIXES:
        if lowered.endswith(suffix) and len(filename) > len(suffix):
            return filename[: -len(suffix)], suffix[1:]
    stem = PurePosixPath(filename)
    return stem.stem, stem.suffix.lstrip(".")


def view_name(relative_path: str, namespace: str = "") -> Tuple[str, str]:
    """Dot-joined view name and extension for a template path relative to its root."""
    parts = [part for part in relative_path.replace("\\", "/").split("/") if part]
    if not parts:
        return "", ""
    stem, extension = strip_template_suffix(parts[-1])
    segments = parts[:-1] + [stem]
    if namespace:
        segments.insert(0, namespace)
    return ".".join(segments), extension


def view_keys(name: str, extension: str) -> List[str]:
    """Alias keys a template is indexed under: dot form, slash form, dot form with extension."""
    keys = [name, name.replace(".", "/")]
    if extension:
        keys.append(f"{name}.{extension}")
        if extension != "php" and extension.endswith("php"):
            keys.append(f"{name}.php")
    ordered: List[str] = []
    for key in keys:
        if key and key not in ordered:
            ordered.append(key)
    return ordered


def view_name_variants(name: str) -> List[str]:
    """Lookup variants for a referenced view name, tried in order."""
    candidates = [
        name,
        name.replace("/", "."),
        name.replace(".", "/"),
        _strip_suffix(name, ".blade.php"),
        _strip_suffix(_strip_suffix(name, ".blade.php"), ".php"),
    ]
    variants: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def _strip_suffix(value: str, suffix: str) -> str:
    return value[: -len(suffix)] if value.endswith(suffix) else value


def file_extension(path: str) -> str:
    return PurePosixPath(path).suffix.lstrip(".").lower()


def asset_type_for(path: str) -> AssetType:
    return _ASSET_TYPES.get(file_extension(path), AssetType.OTHER)


def is_asset_extension(path: str) -> bool:
    extension = file_extension(path)
    return extension in _ASSET_TYPES or extension in _OTHER_ASSET_EXTENSIONS


def asset_lookup_variants(name: str) -> List[str]:
    """Keys tried when resolving a referenced asset path."""
    cleaned = name.split("?", 1)[0].split("#", 1)[0].strip()
    candidates = [cleaned, cleaned.lstrip("/")]
    for prefix in ("resources/", "public/"):
        stripped = cleaned.lstrip("/")
        if stripped.startswith(prefix):
            candidates.append(stripped[len(prefix) :])
    variants: List[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


__all__ = [
    "TEMPLATE_SUFFIXES",
    "asset_lookup_variants",
    "asset_type_for",
    "build_full_name",
    "build_full_path",
    "extract_domain_parameters",
    "extract_parameters",
    "file_extension",
    "infer_parameter_type",
    "is_asset_extension",
    "normalize_domain",
    "normalize_path",
    "split_middleware",
    "strip_template_suffix",
    "view_keys",
    "view_name",
    "view_name_variants",
]
