"""Locating and preparing an AppDir from the desktop file it contains."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

from appimage_helpers.desktop import DESKTOP_ENTRY, check_desktop_file, load_desktop_file
from appimage_helpers.fileutil import copy_file, exists, files_with_suffix

log = logging.getLogger(__name__)

# The most common icon sizes, in the hope that these work on all target systems.
ICON_SIZES = (512, 256, 128, 48, 32, 24, 22, 16, 8)

# The order in which icon sizes are preferred for the top-level icon.
ICON_PREFERENCE_ORDER = (128, 256, 512, 48, 32, 24, 22, 16, 8)


class AppDirError(ValueError):
    """A directory cannot be used as an AppDir."""


def _parent(path: str) -> str:
    return os.path.dirname(path) or "."


def _icon_dir(root: str, size: int) -> str:
    return f"{root}/usr/share/icons/hicolor/{size}x{size}/apps"


def _first_word(value: str) -> str:
    return value.split(" ")[0]


@dataclass
class AppDir:
    """An application directory with its top-level desktop file and main executable."""

    path: str
    desktop_file_path: str
    main_executable: str = ""

    @classmethod
    def from_desktop_file(cls, desktop_file_path: str) -> "AppDir":
        """Build an AppDir from <AppDir>/usr/share/applications/<name>.desktop.

        The desktop file is copied to the AppDir root and the main icon is
        copied there too if it is not present yet.
        """
        if not exists(desktop_file_path):
            raise AppDirError("Desktop file not found")

        root = desktop_file_path
        for _ in range(4):
            root = _parent(root)
        bin_dir = root + "/usr/bin"
        if not exists(bin_dir):
            raise AppDirError(f"AppDir could not be identified: {bin_dir} does not exist")
        log.info("AppDir path: %s", root)

        copy_file(desktop_file_path, f"{root}/{os.path.basename(desktop_file_path)}")

        top_level = files_with_suffix(root, ".desktop")
        if not top_level:
            raise AppDirError(f"No desktop file was found, please place one into {root}")
        if len(top_level) > 1:
            raise AppDirError(f"More than one desktop file was found in {root}")
        desktop = top_level[0]

        parser = load_desktop_file(desktop)
        if not parser.has_section(DESKTOP_ENTRY):
            raise AppDirError(f"section '{DESKTOP_ENTRY}' does not exist")
        entry = parser[DESKTOP_ENTRY]
        if "Exec" not in entry:
            raise AppDirError("'Desktop Entry' section has no Exec= key")

        check_desktop_file(desktop)

        executable = _first_word(entry["Exec"])
        log.info("Exec= key contains: %s", os.path.basename(executable))
        if executable != os.path.basename(executable):
            raise AppDirError("Exec= contains a path, please remove it")

        icon_name = entry["Icon"]
        icon_word = _first_word(icon_name)
        log.info("Icon= key contains: %s", os.path.basename(icon_word))
        if icon_word != os.path.basename(icon_word):
            raise AppDirError("Icon= contains a path, please remove it")

        appdir = cls(
            path=root,
            desktop_file_path=desktop,
            main_executable=f"{root}/usr/bin/{executable}",
        )
        appdir.copy_main_icon_to_root(icon_name)
        return appdir

    def elf_interpreter(self) -> str:
        """Return the ELF interpreter of the main executable as reported by patchelf."""
        command = ["patchelf", "--print-interpreter", self.main_executable]
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            output = (exc.output or b"").decode(errors="replace")
            raise AppDirError(
                f"patchelf --print-interpreter {self.main_executable}: {output}".rstrip()
            ) from exc
        except OSError as exc:
            raise AppDirError(f"patchelf --print-interpreter {self.main_executable}: {exc}") from exc
        return result.stdout.decode(errors="replace").strip()

    def create_icon_directories(self) -> None:
        """Create <AppDir>/usr/share/icons/hicolor/<size>x<size>/apps for the common sizes."""
        for size in ICON_SIZES:
            os.makedirs(_icon_dir(self.path, size), mode=0o755, exist_ok=True)

    def copy_main_icon_to_root(self, icon_name: str) -> None:
        """Copy the most suitable PNG icon called icon_name to the AppDir root, if missing there."""
        target = f"{self.path}/{icon_name}.png"
        if exists(target):
            log.info("Top-level icon already exists, leaving untouched")
            return
        for size in ICON_PREFERENCE_ORDER:
            candidate = f"{_icon_dir(self.path, size)}/{icon_name}.png"
            if exists(candidate):
                copy_file(candidate, target)
                return