"""Utilities for syncing Kobo highlights to Notado."""

__version__ = "1.0.0"

from .config import SyncConfig
from .models import Batch, Bookmark, Content, Highlight

__all__ = ["SyncConfig", "Batch", "Bookmark", "Content", "Highlight", "__version__"]
