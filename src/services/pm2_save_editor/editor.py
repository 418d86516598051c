"""PM2 save editor - main orchestrator.

Owns the loaded save buffer, hands out the stat dictionary, and stamps
a fresh checksum into the image on every save.
"""

import os
import traceback
import warnings
from typing import Any, Callable, Dict, List, Optional

from constants import SAVE_FILE_EXTENSION
from utils.formatting import format_hex_dump, format_stat_value
from utils.logging import log_error, update_log_file_path

from services.pm2_save_editor.checksum import (
    compute_checksum,
    is_full_checksum,
    load_native_checksum,
)
from services.pm2_save_editor.errors import (
    NotLoaded,
    SaveEditorError,
    UnsupportedVersionChecksum,
)
from services.pm2_save_editor.file_io import read_save_file, write_save_file
from services.pm2_save_editor.models import (
    CHECKSUM_OFFSETS,
    CHECKSUM_SIZE,
    DEFAULT_VERSION,
    FIELD_TABLE,
    EditorState,
    FileVersion,
    LoadResult,
    SaveResult,
    StatId,
)
from services.pm2_save_editor.registry import FieldRegistry, build_registry
from services.pm2_save_editor.save_buffer import SaveBuffer


class SaveFileController:
    """Loads, edits and saves one PM2 save image at a time.

    States: EMPTY -> LOADED. A failed load always leaves the controller
    EMPTY, even if a file was loaded before.
    """

    def __init__(
        self,
        default_version: FileVersion = DEFAULT_VERSION,
        backup_on_save: bool = True,
        saves_dir: str = "",
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.default_version = default_version
        self.backup_on_save = backup_on_save
        self.saves_dir = saves_dir
        self.on_status = on_status
        self.path = ""
        self._buffer: Optional[SaveBuffer] = None
        self._version: Optional[FileVersion] = None

    @classmethod
    def from_settings(
        cls,
        settings: Dict[str, Any],
        on_status: Optional[Callable[[str], None]] = None,
    ) -> "SaveFileController":
        """Create a controller from a settings dictionary.

        Points the error log at `work_dir` and installs the native checksum
        routine when `checksum_library` is set.
        """
        work_dir = settings.get("work_dir") or ""
        if work_dir:
            update_log_file_path(work_dir)

        version = FileVersion.from_setting(
            settings.get("default_version") or DEFAULT_VERSION.setting_name
        )
        library = settings.get("checksum_library") or ""
        if library:
            load_native_checksum(library)
        return cls(
            default_version=version,
            backup_on_save=bool(settings.get("backup_on_save", True)),
            saves_dir=settings.get("saves_dir") or "",
            on_status=on_status,
        )

    def _status(self, message: str) -> None:
        if self.on_status:
            self.on_status(message)

    # ---- State ---- #

    @property
    def state(self) -> EditorState:
        return EditorState.LOADED if self._buffer is not None else EditorState.EMPTY

    @property
    def is_loaded(self) -> bool:
        return self._buffer is not None

    @property
    def version(self) -> Optional[FileVersion]:
        return self._version

    def _require_loaded(self) -> SaveBuffer:
        if self._buffer is None:
            raise NotLoaded()
        return self._buffer

    def load(self, raw: bytes, version: Optional[FileVersion] = None) -> None:
        """Take ownership of a copy of `raw` as the current save image.

        Raises:
            SizeMismatch: If `raw` is not exactly one save file long.
        """
        self.unload()
        self._buffer = SaveBuffer(raw)
        self._version = version if version is not None else self.default_version

    def unload(self) -> None:
        self._buffer = None
        self._version = None

    def registry(self) -> FieldRegistry:
        """Fresh stat dictionary bound to the current image."""
        return build_registry(self._require_loaded())

    def describe(self) -> List[str]:
        """One "Label: value" line per stat, in field table order."""
        registry = self.registry()
        return [
            f"{registry[d.stat].label}: {format_stat_value(registry[d.stat].get())}"
            for d in FIELD_TABLE
        ]

    def dump_field(self, stat: StatId) -> str:
        """Hex dump of the raw bytes behind one stat."""
        accessor = self.registry()[stat]
        return format_hex_dump(accessor.raw(), base_offset=accessor.offset)

    # ---- Checksum ---- #

    @property
    def checksum_offset(self) -> int:
        self._require_loaded()
        return CHECKSUM_OFFSETS[self._version]

    @property
    def stored_checksum(self) -> int:
        """Checksum value currently stored in the image."""
        return self._require_loaded().read_uint_le(self.checksum_offset, CHECKSUM_SIZE)

    def compute_checksum(self) -> int:
        return compute_checksum(self._require_loaded(), self._version)

    def checksum_matches(self) -> bool:
        return self.stored_checksum == self.compute_checksum()

    def _apply_checksum(self) -> int:
        buffer = self._require_loaded()
        checksum = compute_checksum(buffer, self._version)
        buffer.write_uint_le(self.checksum_offset, CHECKSUM_SIZE, checksum)
        return checksum

    def _partial_checksum_message(self) -> str:
        return (
            f"Only a partial checksum is available for "
            f"{self._version.name} saves; the game may reject this file"
        )

    def save(self) -> bytes:
        """Stamp the checksum into the image and return its full content.

        Raises:
            NotLoaded: If no save file is loaded.
        """
        self._apply_checksum()
        if not is_full_checksum(self._version):
            warnings.warn(
                UnsupportedVersionChecksum(self._partial_checksum_message()),
                stacklevel=2,
            )
        return self._buffer.to_bytes()

    # ---- File operations ---- #

    def list_save_files(self) -> List[str]:
        """Save files found in `saves_dir`, sorted by name."""
        if not self.saves_dir or not os.path.isdir(self.saves_dir):
            return []
        return sorted(
            os.path.join(self.saves_dir, name)
            for name in os.listdir(self.saves_dir)
            if name.upper().endswith(SAVE_FILE_EXTENSION)
            and os.path.isfile(os.path.join(self.saves_dir, name))
        )

    def open_file(self, path: str, version: Optional[FileVersion] = None) -> LoadResult:
        """Read and load a save file from disk."""
        self._status(f"Opening {path}...")
        try:
            raw = read_save_file(path)
            self.load(raw, version)
        except SaveEditorError as e:
            self.unload()
            log_error(f"Failed to open save file {path}: {e}", type(e).__name__,
                      traceback.format_exc())
            return LoadResult(success=False, path=path, error=str(e))

        self.path = path
        return LoadResult(
            success=True,
            path=path,
            version=self._version,
            checksum_valid=self.checksum_matches(),
        )

    def save_file(self, path: Optional[str] = None) -> SaveResult:
        """Write the current image to `path` (defaults to the opened file)."""
        path = path or self.path
        if not self.is_loaded:
            return SaveResult(success=False, path=path, error=str(NotLoaded()))
        if not path:
            return SaveResult(success=False, error="No output path given")

        self._status(f"Saving {path}...")
        checksum = self._apply_checksum()
        partial = not is_full_checksum(self._version)
        result_warnings = [self._partial_checksum_message()] if partial else []

        try:
            write_save_file(path, self._buffer.to_bytes(), backup=self.backup_on_save)
        except SaveEditorError as e:
            log_error(f"Failed to save file {path}: {e}", type(e).__name__,
                      traceback.format_exc())
            return SaveResult(
                success=False, path=path, error=str(e),
                checksum=checksum, partial_checksum=partial,
            )

        self.path = path
        return SaveResult(
            success=True,
            path=path,
            checksum=checksum,
            partial_checksum=partial,
            warnings=result_warnings,
        )
