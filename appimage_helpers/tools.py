"""Helpers for finding and running external tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Iterable, Sequence

from packaging.version import Version

from appimage_helpers.fileutil import here

log = logging.getLogger(__name__)

MIN_SQUASHFS_VERSION = Version("4.4")


class MissingToolError(FileNotFoundError):
    """A required helper tool is not on the $PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Required helper tool '{tool}' missing")
        self.tool = tool


def add_dirs_to_path(dirs: Iterable[str]) -> None:
    """Prepend each directory in turn to $PATH."""
    for directory in dirs:
        os.environ["PATH"] = f"{directory}:{os.environ.get('PATH', '')}"
    log.info("PATH: %s", os.environ.get("PATH", ""))


def add_here_to_path() -> None:
    """Prepend the directory of the running executable to $PATH."""
    os.environ["PATH"] = f"{here()}:{os.environ.get('PATH', '')}"


def is_command_available(name: str) -> bool:
    """Return True if name is an executable on the $PATH."""
    return shutil.which(name) is not None


def require_tools(tools: Iterable[str]) -> None:
    """Raise MissingToolError for the first tool that is not on the $PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            log.error("Required helper tool %s missing", tool)
            raise MissingToolError(tool)


def _run_checked(command: Sequence[str], message: str) -> None:
    try:
        subprocess.run(
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=True,
        )
    except subprocess.CalledProcessError as exc:
        sys.stderr.write(f"ERROR {command[0]}: {exc}\n")
        sys.stdout.write((exc.output or b"").decode(errors="replace"))
        sys.stderr.write(message)
        raise


def validate_desktop_file(desktop_file: str) -> None:
    """Validate a desktop file with desktop-file-validate; raise CalledProcessError on failure."""
    _run_checked(
        ["desktop-file-validate", os.fspath(desktop_file)],
        "ERROR: Desktop file contains errors. Please fix them. "
        "Please see the Desktop Entry Specification.\n",
    )


def validate_appstream_metainfo_file(appdir_path: str) -> None:
    """Validate the AppStream metainfo in an AppDir with appstreamcli; raise on failure."""
    _run_checked(
        ["appstreamcli", "validate-tree", os.fspath(appdir_path), "--no-net"],
        "ERROR: AppStream metainfo file contains errors. Please fix them. "
        "Please see the AppStream quickstart documentation for desktop applications.\n",
    )


def squashfs_version_sufficient(toolname: str) -> bool:
    """Return True if mksquashfs/unsquashfs reports at least version 4.4."""
    try:
        result = subprocess.run(
            [toolname, "-version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        output = result.stdout.decode(errors="replace")
    except OSError as exc:
        sys.stderr.write(f"ERROR {toolname}: {exc}\n")
        return False
    if "version" not in output:
        sys.stdout.write(output)
        return False
    ver = output.split(" ")[2].strip()
    if "-" in ver:
        ver = ver.split("-")[0]
    found = Version(ver)
    if found < MIN_SQUASHFS_VERSION:
        print(
            toolname,
            "on the $PATH is version",
            found,
            f"but we need at least version {MIN_SQUASHFS_VERSION}, exiting",
        )
        return False
    return True


def run_transparently(command: Sequence[str]) -> None:
    """Run command with inherited stdio and wait; raise CalledProcessError on failure."""
    if not command:
        raise ValueError("empty command")
    subprocess.run(list(command), check=True)


def run_string_transparently(command: str) -> None:
    """Split command on single spaces and run it like run_transparently."""
    run_transparently(command.split(" "))