"""Tests for the save file controller, including on-disk load/save.

Run:
    python -m pytest tests/test_editor.py
    # or directly:
    python tests/test_editor.py
"""

import os
import sys
import tempfile
import warnings
import zlib

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from services.pm2_save_editor import SaveFileController
from services.pm2_save_editor.checksum import (
    PARTIAL_CHECKSUM_VALUE,
    reset_full_checksum,
    set_full_checksum,
)
from services.pm2_save_editor.errors import (
    LoadError,
    NotLoaded,
    SizeMismatch,
    UnsupportedVersionChecksum,
)
from services.pm2_save_editor.file_io import backup_path, read_save_file
from services.pm2_save_editor.models import (
    CHECKSUM_OFFSETS,
    FIELD_TABLE,
    SAVE_FILE_SIZE,
    EditorState,
    FileVersion,
    StatId,
)
from utils.logging import get_log_file, update_log_file_path

_EN = FileVersion.ENGLISH_REFINE
_JP = FileVersion.JAPANESE_REFINE
_EN_OFFSET = CHECKSUM_OFFSETS[_EN]


def _write_file(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


# ---------------------------------------------------------------------------
# In-memory load / save
# ---------------------------------------------------------------------------

def test_starts_empty():
    editor = SaveFileController()
    assert editor.state is EditorState.EMPTY
    assert not editor.is_loaded
    assert editor.version is None
    print("  PASS: test_starts_empty")


def test_load_rejects_wrong_size():
    editor = SaveFileController()
    for size in (SAVE_FILE_SIZE - 1, SAVE_FILE_SIZE + 1):
        try:
            editor.load(bytes(size))
            assert False, f"Should have raised SizeMismatch for {size} bytes"
        except SizeMismatch:
            pass
        assert editor.state is EditorState.EMPTY
    print("  PASS: test_load_rejects_wrong_size")


def test_failed_reload_leaves_editor_empty():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    assert editor.state is EditorState.LOADED
    try:
        editor.load(bytes(100))
        assert False, "Should have raised SizeMismatch"
    except SizeMismatch:
        pass
    assert editor.state is EditorState.EMPTY
    print("  PASS: test_failed_reload_leaves_editor_empty")


def test_load_uses_default_or_given_version():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    assert editor.version is _EN
    editor.load(bytes(SAVE_FILE_SIZE), _JP)
    assert editor.version is _JP
    assert editor.checksum_offset == CHECKSUM_OFFSETS[_JP]

    jp_editor = SaveFileController(default_version=_JP)
    jp_editor.load(bytes(SAVE_FILE_SIZE))
    assert jp_editor.version is _JP
    print("  PASS: test_load_uses_default_or_given_version")


def test_operations_require_loaded_file():
    editor = SaveFileController()
    for operation in (editor.save, editor.registry, editor.compute_checksum):
        try:
            operation()
            assert False, f"{operation.__name__} should raise NotLoaded"
        except NotLoaded:
            pass
    print("  PASS: test_operations_require_loaded_file")


def test_save_blank_english_file():
    """Only the checksum field of an all-zero save changes."""
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE), _EN)
    out = editor.save()

    assert len(out) == SAVE_FILE_SIZE
    expected = zlib.crc32(bytes(SAVE_FILE_SIZE)) & 0xFFFFFFFF
    assert int.from_bytes(out[_EN_OFFSET:_EN_OFFSET + 4], "little") == expected
    assert expected != 0
    assert out[:_EN_OFFSET] == bytes(_EN_OFFSET)
    assert out[_EN_OFFSET + 4:] == bytes(SAVE_FILE_SIZE - _EN_OFFSET - 4)
    print("  PASS: test_save_blank_english_file")


def test_repeated_saves_are_stable():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    first = editor.save()
    second = editor.save()
    assert first == second
    assert editor.checksum_matches()
    print("  PASS: test_repeated_saves_are_stable")


def test_save_uses_installed_full_checksum():
    try:
        set_full_checksum(lambda data, version: 0x0A0B0C0D)
        editor = SaveFileController()
        editor.load(bytes(SAVE_FILE_SIZE))
        out = editor.save()
        assert out[_EN_OFFSET:_EN_OFFSET + 4] == b"\x0D\x0C\x0B\x0A"
    finally:
        reset_full_checksum()
    print("  PASS: test_save_uses_installed_full_checksum")


def test_save_japanese_file_uses_partial_checksum():
    image = bytearray(SAVE_FILE_SIZE)
    jp_offset = CHECKSUM_OFFSETS[_JP]
    image[jp_offset:jp_offset + 4] = b"\xFF\xFF\xFF\xFF"

    editor = SaveFileController()
    editor.load(bytes(image), _JP)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        out = editor.save()

    assert any(issubclass(w.category, UnsupportedVersionChecksum) for w in caught)
    assert int.from_bytes(out[jp_offset:jp_offset + 4], "little") == PARTIAL_CHECKSUM_VALUE
    assert out == bytes(SAVE_FILE_SIZE)
    print("  PASS: test_save_japanese_file_uses_partial_checksum")


def test_english_save_does_not_warn():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        editor.save()
    assert not any(issubclass(w.category, UnsupportedVersionChecksum) for w in caught)
    print("  PASS: test_english_save_does_not_warn")


def test_edits_through_registry_reach_saved_bytes():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    registry = editor.registry()
    registry[StatId.DAUGHTERS_NAME].set("Olive")
    registry[StatId.FIGHTING_REP].set(999)
    registry[StatId.HEIGHT].set(160.5)

    out = editor.save()
    assert out[0:6] == b"Olive\x00"
    assert out[0x4E:0x50] == (999).to_bytes(2, "little")
    assert out[0xF0:0xF2] == (16050).to_bytes(2, "little")
    # A fresh registry sees the same values
    assert editor.registry()[StatId.FIGHTING_REP].get() == 999
    print("  PASS: test_edits_through_registry_reach_saved_bytes")


def test_stored_checksum_and_match():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    assert editor.stored_checksum == 0
    assert not editor.checksum_matches()
    editor.save()
    assert editor.stored_checksum == editor.compute_checksum()
    assert editor.checksum_matches()
    editor.registry()[StatId.STRESS].set(50)
    assert not editor.checksum_matches()
    print("  PASS: test_stored_checksum_and_match")


def test_describe_and_dump_field():
    editor = SaveFileController()
    editor.load(bytes(SAVE_FILE_SIZE))
    editor.registry()[StatId.DAUGHTERS_NAME].set("Olive")
    lines = editor.describe()
    assert len(lines) == len(FIELD_TABLE)
    assert lines[0] == 'Daughter\'s Name: "Olive"'
    assert "Height: 0.00" in lines

    dump = editor.dump_field(StatId.DAUGHTERS_NAME)
    assert dump.startswith("0000  4F 6C 69 76 65 00")
    assert dump.endswith("Olive...........")
    print("  PASS: test_describe_and_dump_field")


# ---------------------------------------------------------------------------
# On-disk load / save
# ---------------------------------------------------------------------------

def test_open_and_save_file_round_trip():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        path = os.path.join(tmp, "F101.GNX")
        _write_file(path, bytes(SAVE_FILE_SIZE))

        editor = SaveFileController()
        result = editor.open_file(path)
        assert result.success, result.error
        assert result.version is _EN
        assert not result.checksum_valid
        assert editor.path == path

        editor.registry()[StatId.STAMINA].set(321)
        saved = editor.save_file()
        assert saved.success, saved.error
        assert saved.path == path
        assert not saved.partial_checksum
        assert saved.warnings == []

        data = read_save_file(path)
        assert data[0x20:0x22] == (321).to_bytes(2, "little")
        assert int.from_bytes(data[_EN_OFFSET:_EN_OFFSET + 4], "little") == saved.checksum

        reopened = SaveFileController()
        assert reopened.open_file(path).checksum_valid
        assert reopened.registry()[StatId.STAMINA].get() == 321
    print("  PASS: test_open_and_save_file_round_trip")


def test_save_file_keeps_backup():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        path = os.path.join(tmp, "F102.GNX")
        original = bytes([0x41]) * SAVE_FILE_SIZE
        _write_file(path, original)

        editor = SaveFileController(backup_on_save=True)
        assert editor.open_file(path).success
        assert editor.save_file().success

        with open(backup_path(path), "rb") as f:
            assert f.read() == original
    print("  PASS: test_save_file_keeps_backup")


def test_save_file_to_new_path_creates_directories():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        editor = SaveFileController()
        editor.load(bytes(SAVE_FILE_SIZE))
        out_path = os.path.join(tmp, "nested", "dir", "F103.GNX")
        result = editor.save_file(out_path)
        assert result.success, result.error
        assert os.path.getsize(out_path) == SAVE_FILE_SIZE
        assert not os.path.exists(backup_path(out_path))
    print("  PASS: test_save_file_to_new_path_creates_directories")


def test_save_file_japanese_reports_partial_checksum():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        editor = SaveFileController()
        editor.load(bytes(SAVE_FILE_SIZE), _JP)
        result = editor.save_file(os.path.join(tmp, "F104.GNX"))
        assert result.success
        assert result.partial_checksum
        assert result.checksum == PARTIAL_CHECKSUM_VALUE
        assert len(result.warnings) == 1
    print("  PASS: test_save_file_japanese_reports_partial_checksum")


def test_open_missing_file_fails_and_logs():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        editor = SaveFileController()
        editor.load(bytes(SAVE_FILE_SIZE))
        result = editor.open_file(os.path.join(tmp, "missing.GNX"))
        assert not result.success
        assert "Could not find file" in result.error
        assert editor.state is EditorState.EMPTY

        with open(get_log_file()) as f:
            log = f.read()
        assert "Failed to open save file" in log
        assert "Type: LoadError" in log
    print("  PASS: test_open_missing_file_fails_and_logs")


def test_open_wrong_size_file_fails():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        path = os.path.join(tmp, "short.GNX")
        _write_file(path, bytes(SAVE_FILE_SIZE + 1))
        result = SaveFileController().open_file(path)
        assert not result.success
        assert "Size mismatch" in result.error

        try:
            read_save_file(path)
            assert False, "Should have raised SizeMismatch"
        except SizeMismatch as e:
            assert isinstance(e, LoadError)
    print("  PASS: test_open_wrong_size_file_fails")


def test_save_file_failures():
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        editor = SaveFileController()

        result = editor.save_file(os.path.join(tmp, "F105.GNX"))
        assert not result.success
        assert "No save file loaded" in result.error

        editor.load(bytes(SAVE_FILE_SIZE))
        result = editor.save_file()
        assert not result.success
        assert "No output path" in result.error

        # A directory cannot be opened for writing
        result = editor.save_file(tmp)
        assert not result.success
        assert "Error creating file" in result.error
    print("  PASS: test_save_file_failures")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_from_settings():
    editor = SaveFileController.from_settings({
        "default_version": "japanese_refine",
        "checksum_library": "",
        "backup_on_save": True,
    })
    assert editor.default_version is _JP
    assert editor.backup_on_save

    editor = SaveFileController.from_settings({})
    assert editor.default_version is _EN
    assert editor.backup_on_save
    assert SaveFileController().backup_on_save
    print("  PASS: test_from_settings")


def test_from_settings_moves_error_log_to_work_dir():
    with tempfile.TemporaryDirectory() as tmp:
        work_dir = os.path.join(tmp, "work")
        editor = SaveFileController.from_settings({"work_dir": work_dir})
        assert get_log_file() == os.path.join(work_dir, "error.log")

        assert not editor.open_file(os.path.join(tmp, "missing.GNX")).success
        with open(get_log_file()) as f:
            assert "Failed to open save file" in f.read()
    print("  PASS: test_from_settings_moves_error_log_to_work_dir")


def test_list_save_files():
    with tempfile.TemporaryDirectory() as tmp:
        for name in ("F102.GNX", "f101.gnx", "notes.txt", "F103.GNX.bak"):
            _write_file(os.path.join(tmp, name), bytes(SAVE_FILE_SIZE))
        os.makedirs(os.path.join(tmp, "OLD.GNX"))

        editor = SaveFileController.from_settings({"saves_dir": tmp})
        assert editor.list_save_files() == [
            os.path.join(tmp, "F102.GNX"),
            os.path.join(tmp, "f101.gnx"),
        ]

        assert SaveFileController().list_save_files() == []
        missing = SaveFileController(saves_dir=os.path.join(tmp, "nope"))
        assert missing.list_save_files() == []
    print("  PASS: test_list_save_files")


def test_from_settings_bad_values():
    try:
        SaveFileController.from_settings({"default_version": "korean"})
        assert False, "Should have raised ValueError"
    except ValueError:
        pass

    with tempfile.TemporaryDirectory() as tmp:
        try:
            SaveFileController.from_settings({
                "checksum_library": os.path.join(tmp, "pm2-checksum.dll"),
            })
            assert False, "Should have raised LoadError"
        except LoadError:
            pass
    print("  PASS: test_from_settings_bad_values")


def test_status_callback():
    messages = []
    with tempfile.TemporaryDirectory() as tmp:
        update_log_file_path(tmp)
        path = os.path.join(tmp, "F106.GNX")
        _write_file(path, bytes(SAVE_FILE_SIZE))
        editor = SaveFileController(on_status=messages.append)
        editor.open_file(path)
        editor.save_file()
    assert messages == [f"Opening {path}...", f"Saving {path}..."]
    print("  PASS: test_status_callback")


if __name__ == "__main__":
    tests = [
        test_starts_empty,
        test_load_rejects_wrong_size,
        test_failed_reload_leaves_editor_empty,
        test_load_uses_default_or_given_version,
        test_operations_require_loaded_file,
        test_save_blank_english_file,
        test_repeated_saves_are_stable,
        test_save_uses_installed_full_checksum,
        test_save_japanese_file_uses_partial_checksum,
        test_english_save_does_not_warn,
        test_edits_through_registry_reach_saved_bytes,
        test_stored_checksum_and_match,
        test_describe_and_dump_field,
        test_open_and_save_file_round_trip,
        test_save_file_keeps_backup,
        test_save_file_to_new_path_creates_directories,
        test_save_file_japanese_reports_partial_checksum,
        test_open_missing_file_fails_and_logs,
        test_open_wrong_size_file_fails,
        test_save_file_failures,
        test_from_settings,
        test_from_settings_moves_error_log_to_work_dir,
        test_list_save_files,
        test_from_settings_bad_values,
        test_status_callback,
    ]
    failed = 0
    for test in tests:
        try:
            test()
        except Exception as e:
            failed += 1
            print(f"  FAIL: {test.__name__}: {e}")
    print(f"\nResults: {len(tests) - failed} passed, {failed} failed")
    sys.exit(1 if failed else 0)
