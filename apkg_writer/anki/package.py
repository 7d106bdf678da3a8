"""
Anki package (.apkg) assembly.

A Package owns a list of decks and media files and turns them into one
.apkg archive: the decks are written into a scratch collection database,
which is then zipped together with the media manifest and media files.
"""

import logging
import math
import os
import tempfile
import time
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence

from ..config import Config
from ..errors import error_handler, io_error, timestamp_error
from .archive import write_archive
from .media import normalize_media_paths
from .snapshot import open_snapshot, write_snapshot


logger = logging.getLogger(__name__)


class PackageState(Enum):
    """Lifecycle of a package build."""
    CONSTRUCTED = "constructed"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


def current_timestamp() -> float:
    """Wall-clock time in seconds, or 0.0 if the clock is unavailable."""
    try:
        return time.time()
    except OSError:
        return 0.0


class Package:
    """
    Packs decks and media files into an .apkg file.

    Decks are any objects with a ``write_to_db(cursor, timestamp, id_gen)``
    method, such as ``genanki.Deck``. Media files are referenced by path and
    stored under slots that follow list order.

    Example:
        deck = genanki.Deck(2059400110, 'Capitals')
        deck.add_note(genanki.Note(model=model, fields=['France', 'Paris']))
        Package([deck], ['sound.mp3', 'images/map.png']).write_to_file('capitals.apkg')

    A package can be written any number of times, one write at a time.
    """

    def __init__(self, decks=None, media_files: Optional[Sequence] = None):
        """
        Args:
            decks: A deck or list of decks, written in list order
            media_files: Media file paths (str, bytes or os.PathLike)

        Raises:
            PathFormatError: If a media path is not a valid file path
        """
        if decks is None:
            decks = []
        elif hasattr(decks, 'write_to_db'):
            decks = [decks]

        self.decks: List = list(decks)
        self.media_files: List[str] = normalize_media_paths(media_files or [])
        self.state = PackageState.CONSTRUCTED

    def write_to(self, out: BinaryIO) -> None:
        """
        Write the package to a binary stream using the current time.

        Raises:
            ApkgWriterError: If any step of the build fails
        """
        self._write_to_maybe_timestamp(out, None)

    def write_to_file(self, file) -> None:
        """
        Write the package to a file using the current time.

        Raises:
            PackageIOError: If the file cannot be created
            ApkgWriterError: If any other step of the build fails
        """
        self._write_to_file_maybe_timestamp(file, None)

    def write_to_timestamp(self, out: BinaryIO, timestamp: float) -> None:
        """
        Write the package to a binary stream using a fixed timestamp.

        Identical decks, media and timestamp produce identical output.

        Raises:
            InputValidationError: If the timestamp is NaN or infinite
            ApkgWriterError: If any other step of the build fails
        """
        self._write_to_maybe_timestamp(out, timestamp)

    def write_to_file_timestamp(self, file, timestamp: float) -> None:
        """Write the package to a file using a fixed timestamp."""
        self._write_to_file_maybe_timestamp(file, timestamp)

    def _write_to_file_maybe_timestamp(self, file, timestamp: Optional[float]) -> None:
        self._check_timestamp(timestamp)

        try:
            out = open(file, "wb")
        except OSError as e:
            self.state = PackageState.FAILED
            raise io_error(e, {'output': str(file)}) from e

        try:
            with out:
                self._write_to_maybe_timestamp(out, timestamp)
        except BaseException:
            # an unfinished archive is never left behind
            try:
                os.remove(file)
            except OSError as e:
                error_handler.add_error(error_handler.handle_cleanup_warning(file, e, {'output': str(file)}))
            raise

        logger.info(f"Wrote Anki package {file}")

    def _write_to_maybe_timestamp(self, out: BinaryIO, timestamp: Optional[float]) -> None:
        self._check_timestamp(timestamp)
        self.state = PackageState.WRITING

        if timestamp is None:
            timestamp = current_timestamp()

        logger.debug(
            f"Writing package with {len(self.decks)} decks and "
            f"{len(self.media_files)} media files at timestamp {timestamp}"
        )

        try:
            with self._scratch_dir() as scratch_dir:
                db_path = Path(scratch_dir) / Config.SNAPSHOT_FILE_NAME

                with open_snapshot(db_path) as cursor:
                    write_snapshot(cursor, self.decks, timestamp)

                write_archive(out, db_path, self.media_files)
        except BaseException:
            self.state = PackageState.FAILED
            raise

        self.state = PackageState.DONE

    def _check_timestamp(self, timestamp: Optional[float]) -> None:
        # identifiers are seeded from floor(timestamp * 1000)
        if timestamp is not None and not math.isfinite(timestamp):
            self.state = PackageState.FAILED
            raise timestamp_error(timestamp)

    def _scratch_dir(self):
        try:
            return tempfile.TemporaryDirectory(prefix="apkg-", dir=Config.ensure_temp_dir())
        except OSError as e:
            raise io_error(e, {'temp_dir': Config.TEMP_DIR}) from e

    def __repr__(self):
        return (
            f"Package(decks={len(self.decks)}, media_files={len(self.media_files)}, "
            f"state={self.state.value})"
        )
