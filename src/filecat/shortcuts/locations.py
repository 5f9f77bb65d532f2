"""Well-known directories scanned for shortcuts."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional


def normalize_path(path: str | Path) -> str:
    """Return ``path`` in absolute form without trailing separators."""
    absolute = os.path.abspath(os.fspath(path))
    separators = os.sep + (os.altsep or "")
    return absolute.rstrip(separators) or absolute


def same_path(left: str | Path, right: str | Path) -> bool:
    """Compare two paths after normalization, ignoring case."""
    return normalize_path(left).casefold() == normalize_path(right).casefold()


def unique_locations(paths: Iterable[Optional[str | Path]]) -> list[Path]:
    """Drop empty entries and case-insensitive duplicates, keeping order."""
    seen: set[str] = set()
    result: list[Path] = []
    for path in paths:
        if not path or not str(path).strip():
            continue
        key = normalize_path(Path(path).expanduser()).casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(Path(path).expanduser())
    return result


def default_scan_locations(
    env: Mapping[str, str] | None = None, platform: str | None = None
) -> list[Path]:
    """Return desktop and start-menu directories for the current user and all users.

    Args:
        env: Environment mapping; defaults to ``os.environ``.
        platform: Platform identifier; defaults to ``sys.platform``.

    Returns:
        list[Path]: Deduplicated directories. Locations whose base variable is
        unset are skipped.
    """
    env = os.environ if env is None else env
    platform = platform or sys.platform

    if platform == "win32":
        user_start = _join(env.get("APPDATA"), "Microsoft", "Windows", "Start Menu")
        shared_start = _join(env.get("ProgramData"), "Microsoft", "Windows", "Start Menu")
        candidates = [
            _join(env.get("USERPROFILE"), "Desktop"),
            _join(env.get("PUBLIC"), "Desktop"),
            user_start,
            shared_start,
            _join(user_start, "Programs"),
            _join(shared_start, "Programs"),
        ]
    else:
        home = env.get("HOME") or str(Path.home())
        data_home = env.get("XDG_DATA_HOME") or _join(home, ".local", "share")
        candidates = [
            env.get("XDG_DESKTOP_DIR") or _join(home, "Desktop"),
            _join(data_home, "applications"),
            "/usr/share/applications",
            "/usr/local/share/applications",
        ]
    return unique_locations(candidates)


def _join(base: Optional[str], *parts: str) -> Optional[str]:
    if not base:
        return None
    return os.path.join(base, *parts)


__all__ = ["normalize_path", "same_path", "unique_locations", "default_scan_locations"]
