"""Reading, checking and cleaning up desktop entry files."""

from __future__ import annotations

import configparser
import logging
import os

from appimage_helpers.fileutil import exists

log = logging.getLogger(__name__)

# Key in desktop files written for integrated AppImages that records where the AppImage is.
EXEC_LOCATION_KEY = "X-ExecLocation"

# Key in desktop files written for integrated AppImages that holds the update information.
UPDATE_INFORMATION_KEY = "X-AppImage-UpdateInformation"

DESKTOP_ENTRY = "Desktop Entry"
REQUIRED_KEYS = ("Categories", "Name", "Exec", "Type", "Icon")
ICON_SUFFIXES = (".png", ".svg", ".svgz", ".xpm")


class DesktopFileError(ValueError):
    """A desktop file cannot be read or does not meet the requirements."""


def applications_dir() -> str:
    """Return the user's applications directory under $XDG_DATA_HOME."""
    data_home = os.environ.get("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(data_home, "applications")


def load_desktop_file(path: str) -> configparser.ConfigParser:
    """Parse a desktop file; semicolons inside values are kept as they are."""
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=None,
        empty_lines_in_values=False,
    )
    parser.optionxform = str  # type: ignore[assignment, method-assign]
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f, source=path)
    except configparser.Error as exc:
        raise DesktopFileError(f"{path}: {exc}") from exc
    return parser


def check_desktop_file(path: str) -> configparser.SectionProxy:
    """Check that a desktop file has the required keys and a plain Icon= name.

    Returns the 'Desktop Entry' section.
    """
    parser = load_desktop_file(path)
    if not parser.has_section(DESKTOP_ENTRY):
        parser.add_section(DESKTOP_ENTRY)
    entry = parser[DESKTOP_ENTRY]
    for key in REQUIRED_KEYS:
        if key not in entry:
            raise DesktopFileError(f".desktop file is missing a '{key}'= key")

    icon = entry["Icon"]
    if "/" in icon:
        raise DesktopFileError("Desktop file contains Icon= entry with a path")
    if os.path.basename(icon).endswith(ICON_SUFFIXES):
        raise DesktopFileError("Desktop file contains Icon= entry with a suffix, please remove the suffix")
    return entry


def _entry_value(parser: configparser.ConfigParser, key: str) -> str:
    if not parser.has_section(DESKTOP_ENTRY):
        return ""
    return parser[DESKTOP_ENTRY].get(key, "")


def exec_file_exists(desktop_file_path: str) -> bool:
    """Return True if the desktop file exists and its X-ExecLocation target exists."""
    if not exists(desktop_file_path):
        return False
    try:
        parser = load_desktop_file(desktop_file_path)
    except (DesktopFileError, OSError, UnicodeDecodeError) as exc:
        log.error("ERROR desktop: %s", exc)
        return False
    target = _entry_value(parser, EXEC_LOCATION_KEY)
    if not exists(target):
        log.info("%s does not exist, it is mentioned in %s", target, desktop_file_path)
        return False
    return True


def _desktop_files(directory: str) -> list[str]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        log.error("ERROR desktop: %s", exc)
        return []
    return [name for name in names if name.endswith(".desktop")]


def delete_desktop_files_with_missing_targets(directory: str | None = None) -> list[str]:
    """Delete appimagekit_*.desktop files whose target is gone; return the deleted paths."""
    directory = directory if directory is not None else applications_dir()
    deleted = []
    for name in _desktop_files(directory):
        if not name.startswith("appimagekit_"):
            continue
        path = os.path.join(directory, name)
        if exec_file_exists(path):
            continue
        log.info("Deleting %s", path)
        try:
            os.remove(path)
        except OSError as exc:
            log.error("ERROR desktop: %s", exc)
            continue
        deleted.append(path)
    return deleted


def values_for_all_desktop_files(key: str, directory: str | None = None) -> list[str]:
    """Return the non-empty values of key in every desktop file whose target exists."""
    directory = directory if directory is not None else applications_dir()
    results = []
    for name in _desktop_files(directory):
        path = os.path.join(directory, name)
        if not exec_file_exists(path):
            continue
        try:
            value = _entry_value(load_desktop_file(path), key)
        except (DesktopFileError, OSError, UnicodeDecodeError) as exc:
            log.error("ERROR values_for_all_desktop_files: %s", exc)
            continue
        if value:
            results.append(value)
    return results