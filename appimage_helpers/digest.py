"""SHA-256 digests of AppImages with the signature sections treated as zeros."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import BinaryIO

from appimage_helpers.elf import ElfError, section_offset_and_length

log = logging.getLogger(__name__)

_CHUNK = 1 << 16

# Sections whose contents are assumed to be all zeros when computing the digest.
SKIPPED_SECTIONS = (".sha256_sig", ".sig_key")


@dataclass(frozen=True)
class ByteRange:
    """A region of a file given by its offset and length."""

    offset: int
    length: int


def _hash_range(f: BinaryIO, h: "hashlib._Hash", offset: int, length: int) -> None:
    if length <= 0:
        return
    log.debug("...hashing %d bytes", length)
    f.seek(offset)
    remaining = length
    while remaining > 0:
        chunk = f.read(min(_CHUNK, remaining))
        if not chunk:
            break
        h.update(chunk)
        remaining -= len(chunk)


def _hash_zeros(h: "hashlib._Hash", length: int) -> None:
    if length <= 0:
        return
    log.debug("...hashing %d bytes as if they were 0x00", length)
    remaining = length
    while remaining > 0:
        n = min(_CHUNK, remaining)
        h.update(bytes(n))
        remaining -= n


def digest_skipping_ranges(f: BinaryIO, ranges: Iterable[ByteRange]) -> "hashlib._Hash":
    """Return a SHA-256 hash of f, with the given ranges hashed as if they held only zeros."""
    size = f.seek(0, os.SEEK_END)
    h = hashlib.sha256()
    position = 0
    for byte_range in sorted(ranges, key=lambda r: r.offset):
        _hash_range(f, h, position, byte_range.offset - position)
        _hash_zeros(h, byte_range.length)
        position = byte_range.offset + byte_range.length
    _hash_range(f, h, position, size - position)
    return h


def sha256_digest(path: str) -> str:
    """Return the hex SHA-256 digest of an AppImage with its signature sections zeroed."""
    ranges = []
    for name in SKIPPED_SECTIONS:
        try:
            offset, length = section_offset_and_length(path, name)
        except ElfError:
            continue
        if length == 0:
            continue
        log.info("Assuming section %s offset %d length %d to contain only '0x00's", name, offset, length)
        ranges.append(ByteRange(offset, length))
    with open(path, "rb") as f:
        return digest_skipping_ranges(f, ranges).hexdigest()