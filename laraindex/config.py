"""Configuration loading for laraindex (.laraindex.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

CONFIG_FILENAME = ".laraindex.yml"

_DEFAULT_FACADES = ["Route"]
_DEFAULT_SCRIPT_EXTENSIONS = [".js", ".ts", ".jsx", ".tsx", ".vue"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RoutesConfig:
    """Route-definition discovery settings."""

    files: List[str] = field(default_factory=list)
    facades: List[str] = field(default_factory=lambda: list(_DEFAULT_FACADES))


@dataclass
class RootsConfig:
    """Extra scan roots appended after the conventional Laravel locations."""

    roots: List[str] = field(default_factory=list)


@dataclass
class UsagesConfig:
    """Reference scanning settings."""

    script_extensions: List[str] = field(
        default_factory=lambda: list(_DEFAULT_SCRIPT_EXTENSIONS)
    )


@dataclass
class LaraIndexConfig:
    """Represents the settings defined in .laraindex.yml."""

    root: Path
    exclude_paths: List[str] = field(default_factory=list)
    routes: RoutesConfig = field(default_factory=RoutesConfig)
    translations: RootsConfig = field(default_factory=RootsConfig)
    views: RootsConfig = field(default_factory=RootsConfig)
    assets: RootsConfig = field(default_factory=RootsConfig)
    usages: UsagesConfig = field(default_factory=UsagesConfig)


def load_config(config_path: Path) -> LaraIndexConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return LaraIndexConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    routes = RoutesConfig()
    routes_data = _as_dict(data.get("routes"))
    if routes_data:
        routes.files = _as_str_list(routes_data.get("files"))
        facades = _as_str_list(routes_data.get("facades"))
        if facades:
            routes.facades = facades

    usages = UsagesConfig()
    usages_data = _as_dict(data.get("usages"))
    if usages_data:
        extensions = [_as_suffix(item) for item in _as_str_list(usages_data.get("script_extensions"))]
        if extensions:
            usages.script_extensions = extensions

    return LaraIndexConfig(
        root=root,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        routes=routes,
        translations=_roots(data.get("translations")),
        views=_roots(data.get("views")),
        assets=_roots(data.get("assets")),
        usages=usages,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _roots(value: Any) -> RootsConfig:
    data = _as_dict(value)
    return RootsConfig(roots=_as_str_list(data.get("roots")))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_suffix(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "LaraIndexConfig",
    "RootsConfig",
    "RoutesConfig",
    "UsagesConfig",
    "load_config",
]
