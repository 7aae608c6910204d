"""Reading and patching sections of ELF files."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from appimage_helpers.fileutil import write_string_at_offset

log = logging.getLogger(__name__)

_MAGIC = b"\x7fELF"
_CLASS32 = 1
_CLASS64 = 2
_SHT_NOBITS = 8

# Architecture names as used in AppImage file names.
_MACHINE_NAMES = {
    0: "EM_NONE",
    2: "EM_SPARC",
    3: "i686",
    8: "EM_MIPS",
    20: "EM_PPC",
    21: "EM_PPC64",
    22: "EM_S390",
    40: "armhf",
    43: "EM_SPARCV9",
    62: "x86_64",
    183: "aarch64",
    243: "EM_RISCV",
    258: "EM_LOONGARCH",
}


class ElfError(ValueError):
    """A file is not a valid ELF file or cannot be patched as asked."""


@dataclass(frozen=True)
class _Section:
    name: str
    type: int
    offset: int
    size: int


@dataclass(frozen=True)
class _ElfHeader:
    elfclass: int
    byteorder: str
    machine: int
    shoff: int
    shentsize: int
    shnum: int
    shstrndx: int


def _parse_header(data: bytes) -> _ElfHeader:
    if len(data) < 16 or data[:4] != _MAGIC:
        raise ElfError(f"bad magic number {data[:4]!r}")
    elfclass = data[4]
    if data[5] == 1:
        byteorder = "<"
    elif data[5] == 2:
        byteorder = ">"
    else:
        raise ElfError(f"unknown ELF data encoding {data[5]}")
    if elfclass == _CLASS64:
        fmt = byteorder + "HHIQQQIHHHHHH"
    elif elfclass == _CLASS32:
        fmt = byteorder + "HHIIIIIHHHHHH"
    else:
        raise ElfError(f"unsupported ELF class {elfclass}")
    try:
        fields = struct.unpack_from(fmt, data, 16)
    except struct.error as exc:
        raise ElfError(f"truncated ELF header: {exc}") from exc
    _, machine, _, _, _, shoff, _, _, _, _, shentsize, shnum, shstrndx = fields
    return _ElfHeader(elfclass, byteorder, machine, shoff, shentsize, shnum, shstrndx)


def _read(path: str) -> tuple[_ElfHeader, list[_Section], bytes]:
    with open(path, "rb") as f:
        data = f.read()
    header = _parse_header(data)
    if header.shnum == 0:
        return header, [], data

    if header.elfclass == _CLASS64:
        fmt = header.byteorder + "IIQQQQIIQQ"
    else:
        fmt = header.byteorder + "IIIIIIIIII"
    want = struct.calcsize(fmt)
    if header.shentsize < want:
        raise ElfError(f"invalid section header entry size {header.shentsize}")
    if header.shstrndx >= header.shnum:
        raise ElfError(f"invalid section name string table index {header.shstrndx}")

    raw: list[tuple[int, int, int, int]] = []
    for index in range(header.shnum):
        start = header.shoff + index * header.shentsize
        try:
            name_off, stype, _, _, offset, size, *_ = struct.unpack_from(fmt, data, start)
        except struct.error as exc:
            raise ElfError(f"truncated section header table: {exc}") from exc
        raw.append((name_off, stype, offset, size))

    _, str_type, str_offset, str_size = raw[header.shstrndx]
    if str_type == _SHT_NOBITS or str_offset + str_size > len(data):
        raise ElfError("invalid section name string table")
    strtab = data[str_offset : str_offset + str_size]

    sections = []
    for name_off, stype, offset, size in raw:
        if name_off > len(strtab):
            raise ElfError(f"invalid section name offset {name_off}")
        end = strtab.find(b"\0", name_off)
        name = strtab[name_off : end if end >= 0 else len(strtab)].decode(errors="replace")
        sections.append(_Section(name, stype, offset, size))
    return header, sections, data


def _find(sections: list[_Section], name: str) -> _Section | None:
    return next((s for s in sections if s.name == name), None)


def section_data(path: str, name: str) -> bytes | None:
    """Return the contents of the named section, or None if there is no such section."""
    _, sections, data = _read(path)
    section = _find(sections, name)
    if section is None:
        return None
    if section.type == _SHT_NOBITS:
        raise ElfError(f"section {name} occupies no space in the file")
    end = section.offset + section.size
    if end > len(data):
        raise ElfError(f"section {name} extends beyond the end of the file")
    return data[section.offset : end]


def section_offset_and_length(path: str, name: str) -> tuple[int, int]:
    """Return the file offset and size of the named section, or (0, 0) if it is absent."""
    _, sections, _ = _read(path)
    section = _find(sections, name)
    if section is None:
        return 0, 0
    return section.offset, section.size


def elf_architecture(path: str) -> str:
    """Return the architecture of an ELF file as used in AppImage names."""
    header, _, _ = _read(path)
    return _MACHINE_NAMES.get(header.machine, str(header.machine))


def calculate_elf_size(path: str) -> int:
    """Return the size of the ELF part of a file: the end of its section header table."""
    header, _, _ = _read(path)
    return header.shoff + header.shentsize * header.shnum


def embed_string_in_section(path: str, section: str, text: str | bytes) -> None:
    """Write text into the named section of the ELF file at path, in place."""
    payload = text.encode() if isinstance(text, str) else bytes(text)
    current = section_data(path, section)
    if current is None:
        raise ElfError(f"Could not find section {section} in runtime")
    offset, length = section_offset_and_length(path, section)
    log.info("Embedded %s section offset: %d, length: %d", section, offset, length)
    if len(payload) > len(current):
        raise ElfError(f"{len(payload)} bytes do not fit into {section} section of {len(current)} bytes")
    log.info("Writing into %s section...", section)
    write_string_at_offset(payload, path, offset)
    updated = section_data(path, section)
    log.info("Embedded %s section now contains: %s", section, (updated or b"").decode(errors="replace"))