"""Filesystem helpers: locating the running program, listing, copying and patching files."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from collections.abc import Iterable, Iterator
from typing import BinaryIO

log = logging.getLogger(__name__)

_SELF_EXE = "/proc/self/exe"


def here() -> str:
    """Return the directory of the running executable as seen by the kernel."""
    try:
        target = os.readlink(_SELF_EXE)
    except OSError:
        target = ""
    return os.path.dirname(target) or "."


def here_args0() -> str:
    """Return the absolute directory of the program named in argv[0]."""
    return os.path.abspath(os.path.dirname(sys.argv[0]))


def args0() -> str:
    """Return the absolute path of the program named in argv[0]."""
    return os.path.abspath(sys.argv[0])


def _walk(path: str) -> Iterator[str]:
    """Yield path and everything below it in lexical order, without following symlinks."""
    try:
        st = os.lstat(path)
    except OSError:
        return
    yield path
    if stat.S_ISDIR(st.st_mode):
        try:
            names = sorted(os.listdir(path))
        except OSError:
            return
        for name in names:
            yield from _walk(os.path.join(path, name))


def files_with_suffix_recursive(directory: str, extension: str) -> list[str]:
    """Return every path below directory (itself included) whose name ends in extension."""
    return [
        path
        for path in _walk(directory)
        if os.path.basename(os.path.normpath(path)).endswith(extension)
    ]


def _entries(directory: str) -> list[str]:
    try:
        return sorted(os.listdir(directory))
    except OSError:
        return []


def files_with_suffix(directory: str, extension: str) -> list[str]:
    """Return the entries directly in directory whose name ends in extension."""
    return [f"{directory}/{name}" for name in _entries(directory) if name.endswith(extension)]


def files_with_prefix(directory: str, prefix: str) -> list[str]:
    """Return the entries directly in directory whose name starts with prefix."""
    return [f"{directory}/{name}" for name in _entries(directory) if name.startswith(prefix)]


def exists(path: str) -> bool:
    """Return False only when path definitely does not exist."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def is_directory(path: str) -> bool:
    """Return True if path is an existing directory."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def file_exists(path: str) -> bool:
    """Return True if path can be stat'ed, False if it does not exist.

    Any other failure is raised, since existence cannot be decided.
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def folder_exists(path: str) -> bool:
    """Return True if path exists and is a directory."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False
    return stat.S_ISDIR(st.st_mode)


def copy_file(src: str, dst: str) -> None:
    """Copy the contents of src (symlinks resolved) to dst, creating parent directories."""
    resolved = os.path.realpath(src, strict=True)
    parent = os.path.dirname(dst)
    if parent:
        os.makedirs(parent, mode=0o755, exist_ok=True)
    shutil.copyfile(resolved, dst)


def write_file_at_offset(input_path: str, output_path: str, offset: int) -> None:
    """Write the contents of input_path into the existing output_path at offset, without truncating."""
    with open(input_path, "rb") as src, open(output_path, "r+b") as out:
        out.seek(offset)
        shutil.copyfileobj(src, out)


def write_string_at_offset(text: str | bytes, output_path: str, offset: int) -> None:
    """Write text into the existing output_path at offset, without truncating."""
    data = text.encode() if isinstance(text, str) else bytes(text)
    with open(output_path, "r+b") as out:
        out.seek(offset)
        out.write(data)


def replace_text_in_file(path: str, search: str | bytes, replace: str | bytes) -> None:
    """Replace every occurrence of search with replace in the file at path."""
    needle = search.encode() if isinstance(search, str) else search
    substitute = replace.encode() if isinstance(replace, str) else replace
    with open(path, "rb") as f:
        content = f.read()
    with open(path, "wb") as f:
        f.write(content.replace(needle, substitute))


def find_most_recent_file(files: Iterable[str]) -> str:
    """Return the regular file with the newest mtime, the first one on ties, or "" if none."""
    best_time: int | None = None
    best_name = ""
    for name in files:
        st = os.stat(name)
        if not stat.S_ISREG(st.st_mode):
            continue
        if best_time is None or st.st_mtime_ns > best_time:
            best_time = st.st_mtime_ns
            best_name = name
    if best_name:
        log.info("Most recent file: %s", best_name)
    return best_name


def check_magic_at_offset(f: BinaryIO, magic: str, offset: int) -> bool:
    """Return True if the bytes at offset in f match the hex string magic."""
    f.seek(offset)
    data = f.read(len(magic) // 2)
    return data.hex() == magic


def check_magic_at_offset_bytes(data: bytes, magic: str, offset: int) -> bool:
    """Return True if the bytes at offset in data match the hex string magic."""
    end = offset + len(magic) // 2
    if offset < 0 or end > len(data):
        raise IndexError(f"range {offset}:{end} out of bounds for {len(data)} bytes")
    return data[offset:end].hex() == magic


def append_if_missing(items: list[str], item: str) -> list[str]:
    """Return items with item appended unless it is already present."""
    if item in items:
        return items
    return [*items, item]