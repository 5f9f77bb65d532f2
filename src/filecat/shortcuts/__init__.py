"""Shortcut creation and cleanup."""

from .locations import default_scan_locations, normalize_path, same_path
from .providers import (
    ShortcutProvider,
    SymlinkShortcutProvider,
    WindowsShortcutProvider,
    default_provider,
)
from .synchronizer import CleanupReport, ShortcutBatchResult, ShortcutSynchronizer

__all__ = [
    "CleanupReport",
    "ShortcutBatchResult",
    "ShortcutProvider",
    "ShortcutSynchronizer",
    "SymlinkShortcutProvider",
    "WindowsShortcutProvider",
    "default_provider",
    "default_scan_locations",
    "normalize_path",
    "same_path",
]
