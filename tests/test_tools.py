import os
import subprocess
import sys

import pytest

from appimage_helpers import tools
from appimage_helpers.fileutil import file_exists, here


def _script(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)
    return path


def test_add_dirs_to_path(monkeypatch, tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    _script(second, "faketool", "exit 0")
    monkeypatch.setenv("PATH", "/base")
    assert tools.is_command_available("faketool") is False
    tools.add_dirs_to_path([str(first), str(second)])
    assert os.environ["PATH"] == f"{second}:{first}:/base"
    assert tools.is_command_available("faketool") is True


def test_add_here_to_path(monkeypatch):
    monkeypatch.setenv("PATH", "/base")
    tools.add_here_to_path()
    assert os.environ["PATH"] == here() + ":/base"


def test_is_command_available(monkeypatch, tmp_path):
    _script(tmp_path, "faketool", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path))
    assert tools.is_command_available("faketool") is True
    assert tools.is_command_available("no-such-tool-here") is False


def test_require_tools_reports_first_missing(monkeypatch, tmp_path):
    _script(tmp_path, "faketool", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(tools.MissingToolError) as info:
        tools.require_tools(["faketool", "missing-one", "missing-two"])
    assert info.value.tool == "missing-one"
    assert isinstance(info.value, FileNotFoundError)


def test_validate_desktop_file_success(monkeypatch, tmp_path):
    marker = tmp_path / "marker"
    _script(tmp_path, "desktop-file-validate", f'printf "%s" "$1" > "{marker}"')
    monkeypatch.setenv("PATH", str(tmp_path))
    assert file_exists(str(marker)) is False
    tools.validate_desktop_file("/some/app.desktop")
    assert file_exists(str(marker)) is True
    assert marker.read_text() == "/some/app.desktop"


def test_validate_desktop_file_failure(monkeypatch, tmp_path, capsys):
    _script(tmp_path, "desktop-file-validate", "echo broken-entry; exit 1")
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.validate_desktop_file("app.desktop")
    assert info.value.returncode == 1
    captured = capsys.readouterr()
    assert "broken-entry" in captured.out
    assert "Desktop file contains errors" in captured.err


def test_validate_appstream_passes_arguments(monkeypatch, tmp_path):
    marker = tmp_path / "marker"
    _script(tmp_path, "appstreamcli", f'echo "$@" > "{marker}"')
    monkeypatch.setenv("PATH", str(tmp_path))
    assert file_exists(str(marker)) is False
    tools.validate_appstream_metainfo_file("/my/AppDir")
    assert file_exists(str(marker)) is True
    assert marker.read_text().strip() == "validate-tree /my/AppDir --no-net"


def test_validate_appstream_failure(monkeypatch, tmp_path):
    _script(tmp_path, "appstreamcli", "exit 4")
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.validate_appstream_metainfo_file("/my/AppDir")
    assert info.value.returncode == 4


@pytest.mark.parametrize(
    "line, expected",
    [
        ("mksquashfs version 4.3-git (2014/06/09)", False),
        ("unsquashfs version 4.4 (2019/08/29)", True),
        ("mksquashfs version 4.6.1 (2023/03/25)", True),
        ("something else entirely", False),
    ],
)
def test_squashfs_version_sufficient(tmp_path, line, expected):
    tool = _script(tmp_path, "mksquashfs", f'echo "{line}"; exit 1')
    assert tools.squashfs_version_sufficient(str(tool)) is expected


def test_squashfs_version_missing_tool(tmp_path):
    assert tools.squashfs_version_sufficient(str(tmp_path / "absent")) is False


def test_run_transparently_failure():
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.run_transparently([sys.executable, "-c", "import sys; sys.exit(3)"])
    assert info.value.returncode == 3


def test_run_transparently_empty():
    with pytest.raises(ValueError):
        tools.run_transparently([])


def test_run_string_transparently(tmp_path):
    marker = tmp_path / "created"
    script = _script(tmp_path, "maker", 'touch "$1"')
    tools.run_string_transparently(f"{script} {marker}")
    assert marker.exists()


def test_run_string_transparently_failure(tmp_path):
    script = _script(tmp_path, "failer", "exit 2")
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.run_string_transparently(str(script))
    assert info.value.returncode == 2