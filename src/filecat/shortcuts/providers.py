"""Platform mechanisms for creating and reading shortcut files."""

from __future__ import annotations

import os
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from filecat.errors import ShortcutCreateError, ShortcutResolveError

_POWERSHELL = ("powershell", "-NoProfile", "-NonInteractive", "-Command")
_CREATE_SCRIPT = (
    "$s = (New-Object -ComObject WScript.Shell).CreateShortcut($env:FILECAT_LINK); "
    "$s.TargetPath = $env:FILECAT_TARGET; $s.Save()"
)
_RESOLVE_SCRIPT = (
    "(New-Object -ComObject WScript.Shell).CreateShortcut($env:FILECAT_LINK).TargetPath"
)


class ShortcutProvider(ABC):
    """Capability for writing and reading shortcut files."""

    #: Suffix appended to shortcut file names.
    suffix: str = ""

    def shortcut_path(self, directory: Path, name: str) -> Path:
        return directory / f"{name}{self.suffix}"

    @abstractmethod
    def create(self, shortcut_path: Path, target: str) -> None:
        """Write a shortcut at ``shortcut_path`` pointing at ``target``.

        Raises:
            ShortcutCreateError: If the shortcut cannot be written.
        """

    @abstractmethod
    def resolve(self, shortcut_path: Path) -> Optional[str]:
        """Return the target recorded in a shortcut, or ``None`` if it has none.

        Raises:
            ShortcutResolveError: If the shortcut cannot be read.
        """

    @abstractmethod
    def is_shortcut(self, path: Path) -> bool:
        """Return True when ``path`` looks like a shortcut this provider reads."""


class SymlinkShortcutProvider(ShortcutProvider):
    """Shortcuts as symbolic links."""

    def create(self, shortcut_path: Path, target: str) -> None:
        try:
            shortcut_path.symlink_to(target)
        except OSError as exc:
            raise ShortcutCreateError(f"Cannot create link {shortcut_path}: {exc}") from exc

    def resolve(self, shortcut_path: Path) -> Optional[str]:
        try:
            target = os.readlink(shortcut_path)
        except OSError as exc:
            raise ShortcutResolveError(f"Cannot read link {shortcut_path}: {exc}") from exc
        if not os.path.isabs(target):
            target = os.path.join(os.path.dirname(shortcut_path), target)
        return target

    def is_shortcut(self, path: Path) -> bool:
        return path.is_symlink()


class WindowsShortcutProvider(ShortcutProvider):
    """``.lnk`` shortcuts driven through the WScript.Shell COM object."""

    suffix = ".lnk"

    def create(self, shortcut_path: Path, target: str) -> None:
        try:
            self._run(_CREATE_SCRIPT, link=shortcut_path, target=target)
        except (OSError, subprocess.SubprocessError) as exc:
            raise ShortcutCreateError(f"Cannot create shortcut {shortcut_path}: {exc}") from exc

    def resolve(self, shortcut_path: Path) -> Optional[str]:
        try:
            output = self._run(_RESOLVE_SCRIPT, link=shortcut_path)
        except (OSError, subprocess.SubprocessError) as exc:
            raise ShortcutResolveError(f"Cannot read shortcut {shortcut_path}: {exc}") from exc
        return output.strip() or None

    def is_shortcut(self, path: Path) -> bool:
        return path.suffix.lower() == self.suffix and path.is_file()

    def _run(self, script: str, *, link: Path, target: str = "") -> str:
        env = dict(os.environ, FILECAT_LINK=str(link), FILECAT_TARGET=target)
        completed = subprocess.run(
            [*_POWERSHELL, script],
            env=env,
            check=True,
            capture_output=True,
            text=True,
            timeout=30,
        )
        return completed.stdout


def default_provider(name: str = "auto") -> ShortcutProvider:
    """Return the provider named in configuration.

    Args:
        name: ``symlink``, ``windows``, or ``auto`` to pick by platform.
    """
    if name == "windows" or (name == "auto" and sys.platform == "win32"):
        return WindowsShortcutProvider()
    return SymlinkShortcutProvider()


__all__ = [
    "ShortcutProvider",
    "SymlinkShortcutProvider",
    "WindowsShortcutProvider",
    "default_provider",
]
