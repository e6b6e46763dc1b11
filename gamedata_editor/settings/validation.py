"""
Settings validation system for the game data editor.
"""

import logging
from typing import List, TYPE_CHECKING

from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        # Data folder must exist once configured
        data_folder = self.settings.paths.data_folder_path
        if data_folder:
            if not data_folder.exists():
                errors.append(f"Data folder does not exist: {data_folder}")
            elif not data_folder.is_dir():
                errors.append(f"Data folder is not a directory: {data_folder}")
        else:
            warnings.append("Data folder not set")

        # CSV folder is created on export
        csv_folder = self.settings.paths.csv_folder_path
        if csv_folder:
            if not csv_folder.exists():
                warnings.append(f"CSV folder does not exist yet: {csv_folder}")
        else:
            warnings.append("CSV folder not set")

        result = ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)
        logger.debug(
            f"Settings validation: {len(errors)} errors, {len(warnings)} warnings"
        )
        return result
