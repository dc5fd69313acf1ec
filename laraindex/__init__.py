"""Static index of Laravel routes, translations, views and assets."""

from .facade import ProjectIndex
from .models import ArtifactKind, AssetType, UsageKind

__version__ = "0.1.0"

__all__ = ["ArtifactKind", "AssetType", "ProjectIndex", "UsageKind", "__version__"]
