"""
Path-related settings for the game data editor.
"""

from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class PathSettings:
    """Manages the data (JSON) and CSV folder locations."""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_str(self, key: str, default: str = "") -> str:
        """Type-safe string retrieval from settings."""
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_path(self, key: str) -> Optional[Path]:
        path_str = self._get_str(key, "")
        return Path(path_str) if path_str else None

    def _set_path(self, key: str, value: Optional[Path]) -> None:
        self.settings.setValue(key, str(value) if value else "")
        self.settings.sync()

    @property
    def data_folder_path(self) -> Optional[Path]:
        """Get folder holding the ``<TableName>.json`` files."""
        return self._get_path("paths/data_folder")

    @data_folder_path.setter
    def data_folder_path(self, value: Optional[Path]) -> None:
        """Set data folder path."""
        self._set_path("paths/data_folder", value)

    @property
    def csv_folder_path(self) -> Optional[Path]:
        """Get folder used for CSV export and import."""
        return self._get_path("paths/csv_folder")

    @csv_folder_path.setter
    def csv_folder_path(self, value: Optional[Path]) -> None:
        """Set CSV folder path."""
        self._set_path("paths/csv_folder", value)
