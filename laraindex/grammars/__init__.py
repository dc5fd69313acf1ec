"""Per-domain literal classifiers and text-pattern tables."""

from .asset import asset_reference, html_asset_context
from .route import controller_method_slot, route_declaration, route_reference
from .translation import in_translation_cache, language_key, translation_reference
from .view import view_reference

__all__ = [
    "asset_reference",
    "controller_method_slot",
    "html_asset_context",
    "in_translation_cache",
    "language_key",
    "route_declaration",
    "route_reference",
    "translation_reference",
    "view_reference",
]
