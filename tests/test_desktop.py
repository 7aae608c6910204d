import os

import pytest

from appimage_helpers.desktop import (
    DesktopFileError,
    applications_dir,
    check_desktop_file,
    delete_desktop_files_with_missing_targets,
    exec_file_exists,
    load_desktop_file,
    values_for_all_desktop_files,
)

GOOD = """[Desktop Entry]
Type=Application
Name=My App
Exec=myapp %F
Icon=myapp
Categories=Utility;Development;
"""


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_check_good_file(tmp_path):
    entry = check_desktop_file(write(tmp_path / "myapp.desktop", GOOD))
    assert entry["Icon"] == "myapp"
    assert entry["Categories"] == "Utility;Development;"


@pytest.mark.parametrize("key", ["Categories", "Name", "Exec", "Type", "Icon"])
def test_check_missing_key(tmp_path, key):
    text = "\n".join(line for line in GOOD.splitlines() if not line.startswith(key + "="))
    with pytest.raises(DesktopFileError, match=f"missing a '{key}'= key"):
        check_desktop_file(write(tmp_path / "a.desktop", text))


def test_check_missing_section(tmp_path):
    with pytest.raises(DesktopFileError, match="Categories"):
        check_desktop_file(write(tmp_path / "a.desktop", "[Other]\nName=x\n"))


def test_check_icon_with_path(tmp_path):
    text = GOOD.replace("Icon=myapp", "Icon=/usr/share/icons/myapp")
    with pytest.raises(DesktopFileError, match="with a path"):
        check_desktop_file(write(tmp_path / "a.desktop", text))


@pytest.mark.parametrize("suffix", [".png", ".svg", ".svgz", ".xpm"])
def test_check_icon_with_suffix(tmp_path, suffix):
    text = GOOD.replace("Icon=myapp", f"Icon=myapp{suffix}")
    with pytest.raises(DesktopFileError, match="suffix"):
        check_desktop_file(write(tmp_path / "a.desktop", text))


def test_load_keeps_semicolons_and_case(tmp_path):
    parser = load_desktop_file(write(tmp_path / "a.desktop", GOOD + "Comment=a ; b # c\nX-Foo=Bar\n"))
    assert parser["Desktop Entry"]["Comment"] == "a ; b # c"
    assert parser["Desktop Entry"]["X-Foo"] == "Bar"


def test_applications_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert applications_dir() == os.path.join(str(tmp_path), "applications")


def test_applications_dir_default(tmp_path, monkeypatch):
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert applications_dir() == os.path.join(str(tmp_path), ".local", "share", "applications")


def entry_for(target, extra=""):
    return f"[Desktop Entry]\nType=Application\nName=x\nX-ExecLocation={target}\n{extra}"


def test_exec_file_exists(tmp_path):
    target = tmp_path / "app.AppImage"
    target.write_bytes(b"")
    assert exec_file_exists(write(tmp_path / "ok.desktop", entry_for(target))) is True
    assert exec_file_exists(write(tmp_path / "gone.desktop", entry_for(tmp_path / "missing"))) is False
    assert exec_file_exists(write(tmp_path / "nokey.desktop", "[Desktop Entry]\nName=x\n")) is False
    assert exec_file_exists(str(tmp_path / "absent.desktop")) is False


def test_delete_desktop_files_with_missing_targets(tmp_path):
    target = tmp_path / "present.AppImage"
    target.write_bytes(b"")
    apps = tmp_path / "applications"
    apps.mkdir()
    write(apps / "appimagekit_a.desktop", entry_for(tmp_path / "missing"))
    write(apps / "appimagekit_b.desktop", entry_for(target))
    write(apps / "other.desktop", entry_for(tmp_path / "missing"))
    deleted = delete_desktop_files_with_missing_targets(str(apps))
    assert deleted == [str(apps / "appimagekit_a.desktop")]
    assert sorted(os.listdir(apps)) == ["appimagekit_b.desktop", "other.desktop"]


def test_delete_in_missing_directory(tmp_path):
    assert delete_desktop_files_with_missing_targets(str(tmp_path / "nope")) == []


def test_values_for_all_desktop_files(tmp_path):
    target = tmp_path / "present.AppImage"
    target.write_bytes(b"")
    apps = tmp_path / "applications"
    apps.mkdir()
    key = "X-AppImage-UpdateInformation"
    write(apps / "a.desktop", entry_for(target, f"{key}=zsync|one.zsync\n"))
    write(apps / "b.desktop", entry_for(tmp_path / "missing", f"{key}=zsync|two.zsync\n"))
    write(apps / "c.desktop", entry_for(target))
    write(apps / "d.desktop", entry_for(target, f"{key}=zsync|four.zsync\n"))
    write(apps / "notes.txt", entry_for(target, f"{key}=zsync|five.zsync\n"))
    assert values_for_all_desktop_files(key, str(apps)) == ["zsync|one.zsync", "zsync|four.zsync"]


def test_values_default_directory(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    target = tmp_path / "present.AppImage"
    target.write_bytes(b"")
    apps = tmp_path / "applications"
    apps.mkdir()
    write(apps / "a.desktop", entry_for(target, "Name=Shown\n"))
    assert values_for_all_desktop_files("Name") == ["Shown"]