"""
Anki package assembly module.

This module provides functionality to write complete .apkg files from
genanki decks and media files, and to read them back for validation.
"""

from .id_generator import IdGenerator
from .snapshot import open_snapshot, write_snapshot
from .media import build_media_manifest, serialize_media_manifest
from .archive import write_archive
from .package import Package, PackageState
from .templates import BasicCardTemplate, CardFormatter
from .validator import PackageValidator

__all__ = [
    'IdGenerator',
    'open_snapshot',
    'write_snapshot',
    'build_media_manifest',
    'serialize_media_manifest',
    'write_archive',
    'Package',
    'PackageState',
    'BasicCardTemplate',
    'CardFormatter',
    'PackageValidator'
]
