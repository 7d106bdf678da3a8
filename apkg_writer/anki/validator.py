"""
Reading back and validating written .apkg packages.
"""

import json
import logging
import os
import sqlite3
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Dict

from ..config import Config


logger = logging.getLogger(__name__)


REQUIRED_TABLES = ('col', 'notes', 'cards', 'revlog', 'graves')


def read_snapshot_counts(snapshot_bytes: bytes) -> Dict[str, Any]:
    """
    Summarize the rows of a ``collection.anki2`` database.

    Args:
        snapshot_bytes: Raw bytes of the collection database

    Returns:
        Dictionary with tables, collection row count, decks (id → name),
        model ids, note count, card count and note/card identifiers

    Raises:
        sqlite3.DatabaseError: If the bytes are not a readable collection
    """
    with tempfile.TemporaryDirectory(prefix="apkg-read-") as scratch_dir:
        db_path = Path(scratch_dir) / Config.SNAPSHOT_FILE_NAME
        db_path.write_bytes(snapshot_bytes)

        conn = sqlite3.connect(str(db_path))
        try:
            tables = {
                row[0] for row in
                conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
            missing = [table for table in REQUIRED_TABLES if table not in tables]
            if missing:
                raise sqlite3.DatabaseError(f"Missing tables: {', '.join(missing)}")

            col_rows = conn.execute("SELECT decks, models FROM col").fetchall()
            decks = {}
            models = []
            for decks_json, models_json in col_rows:
                decks.update({
                    deck_id: deck.get('name') for deck_id, deck in json.loads(decks_json).items()
                })
                models.extend(json.loads(models_json).keys())

            note_ids = [row[0] for row in conn.execute("SELECT id FROM notes ORDER BY id")]
            card_ids = [row[0] for row in conn.execute("SELECT id FROM cards ORDER BY id")]
            cards_per_deck = dict(conn.execute("SELECT did, COUNT(*) FROM cards GROUP BY did"))
        finally:
            conn.close()

    return {
        'tables': sorted(tables),
        'col_rows': len(col_rows),
        'decks': decks,
        'models': models,
        'note_count': len(note_ids),
        'card_count': len(card_ids),
        'note_ids': note_ids,
        'card_ids': card_ids,
        'cards_per_deck': {str(did): count for did, count in cards_per_deck.items()},
    }


class PackageValidator:
    """
    Validates Anki packages for correctness and completeness.
    """

    @staticmethod
    def validate_package(package_path: str) -> bool:
        """
        Validate that an Anki package is properly formatted.

        Checks the archive members, the media manifest slots and that the
        collection database opens with the expected tables.

        Args:
            package_path: Path to the .apkg file

        Returns:
            True if package is valid, False otherwise
        """
        if not os.path.exists(package_path):
            logger.error(f"Package file not found: {package_path}")
            return False

        if not str(package_path).lower().endswith(Config.PACKAGE_EXTENSION):
            logger.warning(f"Unexpected file extension: {package_path}")

        if not zipfile.is_zipfile(package_path):
            logger.error(f"Package is not a complete zip archive: {package_path}")
            return False

        try:
            with zipfile.ZipFile(package_path) as archive:
                names = archive.namelist()

                for required in (Config.COLLECTION_MEMBER_NAME, Config.MEDIA_MEMBER_NAME):
                    if required not in names:
                        logger.error(f"Package is missing member {required!r}")
                        return False

                manifest = json.loads(archive.read(Config.MEDIA_MEMBER_NAME).decode('utf-8'))
                if not isinstance(manifest, dict):
                    logger.error(f"Media manifest is not a JSON object: {type(manifest).__name__}")
                    return False

                expected_slots = {str(slot) for slot in range(len(manifest))}
                if set(manifest) != expected_slots:
                    logger.error(f"Media manifest slots are not sequential: {sorted(manifest)}")
                    return False

                missing_slots = [slot for slot in sorted(expected_slots, key=int) if slot not in names]
                if missing_slots:
                    logger.error(f"Package is missing media members {missing_slots}")
                    return False

                read_snapshot_counts(archive.read(Config.COLLECTION_MEMBER_NAME))

        except (zipfile.BadZipFile, ValueError, sqlite3.DatabaseError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.error(f"Package validation failed: {e}")
            return False

        logger.info(f"Package validation passed: {package_path} ({os.path.getsize(package_path)} bytes)")
        return True

    @staticmethod
    def get_package_info(package_path: str) -> dict:
        """
        Get information about an Anki package.

        Args:
            package_path: Path to the .apkg file

        Returns:
            Dictionary with package information
        """
        info = {
            'path': str(package_path),
            'exists': False,
            'size_bytes': 0,
            'valid': False,
            'members': [],
            'media': {},
        }

        if not os.path.exists(package_path):
            return info

        info['exists'] = True
        info['size_bytes'] = os.path.getsize(package_path)
        info['valid'] = PackageValidator.validate_package(package_path)

        if info['valid']:
            with zipfile.ZipFile(package_path) as archive:
                info['members'] = archive.namelist()
                info['media'] = json.loads(archive.read(Config.MEDIA_MEMBER_NAME).decode('utf-8'))
                info.update(read_snapshot_counts(archive.read(Config.COLLECTION_MEMBER_NAME)))

        return info
