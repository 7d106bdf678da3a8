"""
Anki package writer.

Assembles genanki decks and media files into portable .apkg archives.
"""

from .anki import Package, PackageState, PackageValidator
from .errors import (
    ApkgWriterError, PathFormatError, PackageIOError, DatabaseError,
    ArchiveError, EncodingError, InputValidationError
)

__version__ = "0.1.0"

__all__ = [
    'Package',
    'PackageState',
    'PackageValidator',
    'ApkgWriterError',
    'PathFormatError',
    'PackageIOError',
    'DatabaseError',
    'ArchiveError',
    'EncodingError',
    'InputValidationError'
]
