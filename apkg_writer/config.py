"""
Configuration settings for the Anki package writer.
"""

import os
import zipfile
from pathlib import Path


class Config:
    """Configuration class for package writer settings."""

    # Archive member names recognized by Anki when importing a package
    COLLECTION_MEMBER_NAME = "collection.anki2"
    MEDIA_MEMBER_NAME = "media"

    # Scratch collection database
    SNAPSHOT_FILE_NAME = "collection.anki2"
    TEMP_DIR = os.environ.get("APKG_WRITER_TEMP_DIR") or None

    # Archive settings; a fixed member timestamp keeps output reproducible
    ARCHIVE_COMPRESSION = zipfile.ZIP_DEFLATED
    ARCHIVE_DATE_TIME = (1980, 1, 1, 0, 0, 0)

    # Output settings
    PACKAGE_EXTENSION = ".apkg"
    DEFAULT_DECK_NAME = "Imported Notes"

    @classmethod
    def ensure_temp_dir(cls):
        """Create the configured scratch directory if one is set."""
        if cls.TEMP_DIR:
            Path(cls.TEMP_DIR).mkdir(parents=True, exist_ok=True)
        return cls.TEMP_DIR
