import pytest
import responses

from appimage_helpers.github import (
    API_URL,
    GitHubError,
    commit_message_for_latest_commit,
    commit_message_for_travis_commit,
    release_url,
)
from appimage_helpers.updateinfo import UpdateInformation

RELEASE_URL = f"{API_URL}/repos/user/project/releases/tags/continuous"
COMMIT_URL = f"{API_URL}/repos/user/project/git/commits/abc123"


@pytest.fixture
def gh_ui():
    return UpdateInformation.from_string(
        "gh-releases-zsync|user|project|continuous|App*-x86_64.AppImage.zsync"
    )


@pytest.fixture
def bintray_ui():
    return UpdateInformation.from_string("bintray-zsync|user|project|pkg|App-x86_64.AppImage.zsync")


def test_commit_message_for_latest_commit(gh_ui):
    with responses.RequestsMock() as rsps:
        rsps.get(RELEASE_URL, json={"target_commitish": "abc123", "html_url": "https://example.com/r"})
        rsps.get(COMMIT_URL, json={"sha": "abc123", "message": "Fix the build"})
        assert commit_message_for_latest_commit(gh_ui) == "Fix the build"


def test_commit_message_release_missing(gh_ui):
    with responses.RequestsMock() as rsps:
        rsps.get(RELEASE_URL, status=404, json={"message": "Not Found"})
        with pytest.raises(GitHubError, match="404"):
            commit_message_for_latest_commit(gh_ui)


def test_commit_message_other_transport(bintray_ui):
    with pytest.raises(GitHubError, match="Not yet implemented"):
        commit_message_for_latest_commit(bintray_ui)


def test_release_url(gh_ui):
    with responses.RequestsMock() as rsps:
        rsps.get(RELEASE_URL, json={"target_commitish": "abc123", "html_url": "https://example.com/r"})
        assert release_url(gh_ui) == "https://example.com/r"


def test_release_url_other_transport(bintray_ui):
    with pytest.raises(GitHubError, match="Could not get URL"):
        release_url(bintray_ui)


def test_release_url_server_error(gh_ui):
    with responses.RequestsMock() as rsps:
        rsps.get(RELEASE_URL, status=500, body="oops")
        with pytest.raises(GitHubError, match="500"):
            release_url(gh_ui)


def test_travis_commit_message(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.setenv("TRAVIS_REPO_SLUG", "user/project")
    with responses.RequestsMock() as rsps:
        rsps.get(COMMIT_URL, json={"message": "Release it"})
        assert commit_message_for_travis_commit() == "Release it"


def test_travis_commit_missing(monkeypatch):
    monkeypatch.delenv("TRAVIS_COMMIT", raising=False)
    monkeypatch.setenv("TRAVIS_REPO_SLUG", "user/project")
    with pytest.raises(GitHubError, match="TRAVIS_COMMIT"):
        commit_message_for_travis_commit()


def test_travis_slug_missing(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.delenv("TRAVIS_REPO_SLUG", raising=False)
    with pytest.raises(GitHubError, match="TRAVIS_REPO_SLUG"):
        commit_message_for_travis_commit()


def test_travis_slug_unsplittable(monkeypatch):
    monkeypatch.setenv("TRAVIS_COMMIT", "abc123")
    monkeypatch.setenv("TRAVIS_REPO_SLUG", "project")
    with pytest.raises(GitHubError, match="Cannot split"):
        commit_message_for_travis_commit()