# appimage-helpers

A library of building blocks for tools that prepare and manage AppImages.
It finds and checks AppDirs and desktop files and reads and patches ELF
sections. It also computes the SHA-256 digest that signatures are made over,
parses update information strings, looks up GitHub releases and announces
new versions over MQTT.

## Installation

```
pip install appimage-helpers
```

Some functions start external tools, which must then be on `$PATH`:

- `patchelf` for `AppDir.elf_interpreter()`
- `desktop-file-validate` for `tools.validate_desktop_file()`
- `appstreamcli` for `tools.validate_appstream_metainfo_file()`
- `mksquashfs` or `unsquashfs` for `tools.squashfs_version_sufficient()`

## Modules

### `appimage_helpers.appdir`

`AppDir.from_desktop_file(path)` takes a desktop file at
`<AppDir>/usr/share/applications/<name>.desktop`. It takes the AppDir root to
be four directories up and requires `<root>/usr/bin` to exist. It copies the
desktop file to the root, which must then hold exactly one `.desktop` file,
and checks that file with `desktop.check_desktop_file()`. Neither `Exec=` nor
`Icon=` may contain a path. It then copies a PNG icon from
`usr/share/icons/hicolor/<size>x<size>/apps` to the root, unless the root
already has one. Sizes are tried in the order 128, 256, 512, 48, 32, 24, 22,
16, 8. The resulting object has `path`, `desktop_file_path` and
`main_executable` (`<root>/usr/bin/<Exec>`). Problems raise `AppDirError`.

`AppDir.create_icon_directories()` creates the hicolor `apps` directories
for the sizes 512, 256, 128, 48, 32, 24, 22, 16 and 8.
`AppDir.elf_interpreter()` returns what `patchelf --print-interpreter`
reports for the main executable.

### `appimage_helpers.desktop`

- `load_desktop_file(path)` parses a desktop file and keeps `;` inside values.
- `check_desktop_file(path)` requires `Categories`, `Name`, `Exec`, `Type`
  and `Icon`. It rejects an `Icon=` with a path or with a `.png`, `.svg`,
  `.svgz` or `.xpm` suffix. It returns the `Desktop Entry` section and raises
  `DesktopFileError` otherwise.
- `exec_file_exists(path)` tells whether the file named by the
  `X-ExecLocation` key exists.
- `delete_desktop_files_with_missing_targets(directory=None)` removes
  `appimagekit_*.desktop` files whose target is gone and returns their paths.
- `values_for_all_desktop_files(key, directory=None)` collects the non-empty
  values of a key from the desktop files whose target exists.

Both default to `applications_dir()`, which is `$XDG_DATA_HOME/applications`
or `~/.local/share/applications`.

### `appimage_helpers.elf`

This module reads and patches ELF files (32 and 64 bit, either byte order):

- `section_data(path, name)` returns the section's bytes, or `None` if the
  file has no such section.
- `section_offset_and_length(path, name)` returns the offset and length, or
  `(0, 0)` if the file has no such section.
- `elf_architecture(path)` returns `x86_64`, `i686`, `armhf`, `aarch64` or
  another machine name.
- `calculate_elf_size(path)` gives the end of the section header table, that
  is, where the ELF part of an AppImage ends.
- `embed_string_in_section(path, section, text)` writes text into a section
  in place and fails if it does not fit.

Malformed files raise `ElfError`.

### `appimage_helpers.digest`

`sha256_digest(path)` returns the hex SHA-256 of a file, hashing its
`.sha256_sig` and `.sig_key` sections as if they held only zero bytes.
`digest_skipping_ranges(f, ranges)` does the same for any list of
`ByteRange(offset, length)`.

### `appimage_helpers.updateinfo`

- `validate_update_information(text)` accepts strings such as
  `gh-releases-zsync|user|project|latest|App*-x86_64.AppImage.zsync`. The
  transport must be `zsync`, `bintray-zsync` or `gh-releases-zsync`, and the
  last part must end in `.zsync`, where a query string is allowed. A plain
  `zsync` URL must carry a scheme.
- `UpdateInformation.from_string(text)` splits such a string into its fields.
- `read_update_info(path)` reads the string from the `.upd_info` section of
  an AppImage.

Errors raise `UpdateInformationError`.

### `appimage_helpers.openssl`

This module does salted AES-256-CBC with MD5 key derivation
(`evp_bytes_to_key`), in the format of `openssl enc -aes-256-cbc -md md5`.
It offers `encrypt`/`decrypt` for bytes, `encrypt_base64`/`decrypt_base64`,
and `encrypt_string`/`decrypt_string`. Output from `openssl` can be
decrypted. `encrypt` adds padding only when the salted data is not already a
whole number of blocks, so plaintexts whose length is a multiple of 16 come
out unpadded. Bad input raises `DecryptionError`.

### `appimage_helpers.github`

These functions make unauthenticated GitHub API requests, which are subject
to its rate limit:

- `release_url(ui)` looks up the release named in a `gh-releases-zsync`
  `UpdateInformation`.
- `commit_message_for_latest_commit(ui)` returns the message of the commit
  that release points to.
- `commit_message_for_travis_commit()` uses `$TRAVIS_COMMIT` and
  `$TRAVIS_REPO_SLUG`.

Failures raise `GitHubError`.

### `appimage_helpers.mqtt`

- `version_topic(update_information)` returns
  `p9q358t/<url-escaped update information>/version`.
- `publish_mqtt_message(update_information, version)` publishes the version
  to that topic, retained and with QoS 2. It uses the broker in
  `MQTT_SERVER_URI`.
- `PubSubData` holds a name, a version and a timestamp, with
  `to_json()`/`from_json()`.

### `appimage_helpers.kicktimer`

`Watchdog(interval, callback)` calls `callback` once after `interval`
seconds. `kick()` restarts the countdown, even after the callback has run,
and `stop()` cancels it.

### `appimage_helpers.fileutil` and `appimage_helpers.tools`

`fileutil` lists files by prefix or suffix, tests for existence, copies
files, and writes into a file at an offset. It also replaces text in a file,
finds the newest file, checks hex magic at an offset, and locates the running
program (`here()`, `args0()`).

`tools` prepends directories to `$PATH`, checks for executables
(`is_command_available`, and `require_tools`, which raises
`MissingToolError`), and runs the validators. `run_transparently` and
`run_string_transparently` run a command with the terminal attached and raise
`subprocess.CalledProcessError` when it fails.

## Example

```python
from appimage_helpers.digest import sha256_digest
from appimage_helpers.updateinfo import UpdateInformation, validate_update_information

info = "gh-releases-zsync|user|project|latest|App*-x86_64.AppImage.zsync"
validate_update_information(info)
ui = UpdateInformation.from_string(info)
print(ui.username, ui.repository, ui.release_name)

print(sha256_digest("App-x86_64.AppImage"))
```

## What this package does not do

This package is a library only and has no command-line program. It does not
create squashfs images or assemble AppImages. It does not create keys and
does not sign AppImages or verify their signatures. It computes the digest
that a signature covers and can embed a finished signature string with
`elf.embed_string_in_section()`. It only publishes version messages over
MQTT and does not subscribe to them.

## Running the tests

```
pip install -e ".[test]"
pytest
```