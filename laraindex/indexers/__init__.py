"""Declaration indexers, one per artifact domain."""

from .assets import AssetIndexer
from .base import Generation, Indexer
from .routes import RouteGroupContext, RouteIndexer
from .translations import TranslationIndexer
from .views import ViewIndexer

__all__ = [
    "AssetIndexer",
    "Generation",
    "Indexer",
    "RouteGroupContext",
    "RouteIndexer",
    "TranslationIndexer",
    "ViewIndexer",
]
