"""Looking up releases and commit messages on GitHub."""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import quote

import requests

from appimage_helpers.updateinfo import UpdateInformation

API_URL = "https://api.github.com"
TIMEOUT = 30
GH_RELEASES = "gh-releases-zsync"


class GitHubError(RuntimeError):
    """A GitHub lookup failed or is not possible for the given input."""


def _get(*path: str) -> dict[str, Any]:
    url = API_URL + "".join("/" + quote(part, safe="") for part in path)
    try:
        response = requests.get(
            url,
            headers={"Accept": "application/vnd.github+json"},
            timeout=TIMEOUT,
        )
    except requests.RequestException as exc:
        raise GitHubError(f"GET {url}: {exc}") from exc
    if response.status_code != 200:
        try:
            message = response.json().get("message", "")
        except ValueError:
            message = response.text
        raise GitHubError(f"GET {url}: {response.status_code} {message}".rstrip())
    try:
        return response.json()
    except ValueError as exc:
        raise GitHubError(f"GET {url}: invalid JSON response") from exc


def _release(ui: UpdateInformation) -> dict[str, Any]:
    return _get("repos", ui.username, ui.repository, "releases", "tags", ui.release_name)


def _commit_message(owner: str, repo: str, sha: str) -> str:
    return _get("repos", owner, repo, "git", "commits", sha).get("message") or ""


def commit_message_for_latest_commit(ui: UpdateInformation) -> str:
    """Return the message of the commit the release named in ui points to."""
    if ui.transport_mechanism != GH_RELEASES:
        raise GitHubError("Not yet implemented for this transport mechanism")
    commit = _release(ui).get("target_commitish") or ""
    return _commit_message(ui.username, ui.repository, commit)


def release_url(ui: UpdateInformation) -> str:
    """Return the web URL of the release named in ui."""
    if ui.transport_mechanism != GH_RELEASES:
        raise GitHubError("GetReleaseURL: Could not get URL")
    return _release(ui).get("html_url") or ""


def commit_message_for_travis_commit() -> str:
    """Return the message of the commit in $TRAVIS_COMMIT of the repository $TRAVIS_REPO_SLUG."""
    commit = os.environ.get("TRAVIS_COMMIT", "")
    if not commit:
        raise GitHubError("TRAVIS_COMMIT environment variable missing. Not running on Travis CI?")
    slug = os.environ.get("TRAVIS_REPO_SLUG", "")
    if not slug:
        raise GitHubError("TRAVIS_REPO_SLUG environment variable missing. Not running on Travis CI?")
    parts = slug.split("/")
    if len(parts) < 2:
        raise GitHubError("Cannot split repo_slug")
    return _commit_message(parts[0], parts[1], commit)