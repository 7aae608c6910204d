"""Parsing and validating AppImage update information strings."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from appimage_helpers.elf import ElfError, section_data

TRANSPORT_MECHANISMS = ("zsync", "bintray-zsync", "gh-releases-zsync")

UPDATE_INFO_SECTION = ".upd_info"


class UpdateInformationError(ValueError):
    """An update information string is invalid or cannot be read."""


def validate_update_information(text: str) -> None:
    """Raise UpdateInformationError unless text is a well-formed update information string."""
    parts = text.split("|")
    if len(parts) < 2:
        raise UpdateInformationError("Update information isn't valid")
    mechanism = parts[0]
    if mechanism not in TRANSPORT_MECHANISMS:
        raise UpdateInformationError("Invalid transport mechanism in update information")

    # A query such as "some.zsync?foo=bar" is allowed, hence the URL parsing.
    try:
        url = urlsplit(parts[-1])
    except ValueError as exc:
        raise UpdateInformationError("Cannot parse URL in update information") from exc
    if mechanism == "zsync" and not url.scheme:
        raise UpdateInformationError(
            "Scheme is missing in update information, zsync needs e.g. http:// or https://"
        )
    if not url.path.endswith(".zsync"):
        raise UpdateInformationError(f"Update information '{text}' does not end in .zsync")


@dataclass(frozen=True)
class UpdateInformation:
    """The parts of an update information string, which also identifies a family of AppImages."""

    transport_mechanism: str
    file_url: str = ""
    username: str = ""
    repository: str = ""
    release_name: str = ""
    filename: str = ""
    package_name: str = ""

    @classmethod
    def from_string(cls, text: str) -> "UpdateInformation":
        """Parse an update information string such as 'gh-releases-zsync|user|repo|latest|*.zsync'."""
        validate_update_information(text)
        parts = text.split("|")
        mechanism = parts[0]
        if mechanism == "zsync":
            return cls(transport_mechanism=mechanism, file_url=parts[1])
        if len(parts) < 5:
            raise UpdateInformationError("Update information isn't valid")
        if mechanism == "gh-releases-zsync":
            return cls(
                transport_mechanism=mechanism,
                username=parts[1],
                repository=parts[2],
                release_name=parts[3],
                filename=parts[4],
            )
        return cls(
            transport_mechanism=mechanism,
            username=parts[1],
            repository=parts[2],
            package_name=parts[3],
            filename=parts[4],
        )


def read_update_info(path: str) -> str:
    """Return the update information string stored in the .upd_info section of an AppImage."""
    try:
        data = section_data(path, UPDATE_INFO_SECTION)
    except OSError as exc:
        raise UpdateInformationError("file not found") from exc
    except ElfError as exc:
        if "section" in str(exc):
            raise UpdateInformationError("unable to read update information from section") from exc
        raise UpdateInformationError("file not found") from exc
    if data is None:
        raise UpdateInformationError("ELF missing .upd_info section")
    end = data.find(b"\0")
    if end <= 0:
        raise UpdateInformationError("no update information found")
    return data[:end].decode(errors="replace")