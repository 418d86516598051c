"""PM2 Save Editor service.

Reads Princess Maker 2 Refine save files, exposes each statistic as a
typed, range-checked field, and rewrites the file checksum on save.
"""

from services.pm2_save_editor.editor import SaveFileController
from services.pm2_save_editor.models import FileVersion, StatId

__all__ = ["SaveFileController", "FileVersion", "StatId"]
