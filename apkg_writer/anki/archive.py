"""
Zip packaging of a committed collection database and its media.

Member layout, in order: ``collection.anki2``, ``media``, then one member
per media slot named ``0``, ``1``, ... holding the file's raw bytes.
"""

import logging
import zipfile
from typing import BinaryIO, Sequence

from ..config import Config
from ..errors import archive_error, io_error
from .media import build_media_manifest, serialize_media_manifest


logger = logging.getLogger(__name__)


def read_file_bytes(path) -> bytes:
    """
    Read a whole file.

    Raises:
        PackageIOError: If the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise io_error(e, {'path': str(path)}) from e


class ArchiveWriter:
    """
    Writes package members into a zip archive on a caller-owned stream.

    The archive trailer (central directory) is written only by ``finish``.
    ``abandon`` drops the archive without writing it, so a failed build never
    looks like a complete package. The output stream itself is never closed.
    """

    def __init__(self, out: BinaryIO):
        try:
            self._zip = zipfile.ZipFile(out, "w", compression=Config.ARCHIVE_COMPRESSION)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise archive_error(e) from e
        except OSError as e:
            raise io_error(e) from e
        self.members = []

    def write_member(self, name: str, data: bytes) -> None:
        """Write one member with a fixed timestamp and compression."""
        info = zipfile.ZipInfo(name, date_time=Config.ARCHIVE_DATE_TIME)
        info.compress_type = Config.ARCHIVE_COMPRESSION
        # regular file, rw-r--r--
        info.external_attr = 0o100644 << 16

        try:
            self._zip.writestr(info, data)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise archive_error(e, {'member': name}) from e
        except OSError as e:
            raise io_error(e, {'member': name}) from e

        self.members.append(name)
        logger.debug(f"Wrote archive member {name!r} ({len(data)} bytes)")

    def finish(self) -> None:
        """Write the central directory, completing the archive."""
        try:
            self._zip.close()
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise archive_error(e) from e
        except OSError as e:
            raise io_error(e) from e

    def abandon(self) -> None:
        """Discard the archive without writing its central directory."""
        # CPython's ZipFile.close() returns before writing the central
        # directory when fp is None, and ZipFile.__del__ only calls close().
        # The caller still owns and closes the underlying stream.
        self._zip.fp = None


def write_archive(out: BinaryIO, snapshot_path, media_files: Sequence[str]) -> ArchiveWriter:
    """
    Package a committed collection database and media files into ``out``.

    Args:
        out: Writable binary stream
        snapshot_path: Path of the committed collection database
        media_files: Normalized media paths; index = slot

    Returns:
        The finished ArchiveWriter, listing the members written

    Raises:
        PackageIOError: If the database or a media file cannot be read, or
            the output cannot be written
        PathFormatError: If a media path has no file name
        EncodingError: If a media name or the manifest cannot be encoded
        ArchiveError: If the zip library rejects a member or the trailer
    """
    writer = ArchiveWriter(out)

    try:
        writer.write_member(Config.COLLECTION_MEMBER_NAME, read_file_bytes(snapshot_path))

        manifest = build_media_manifest(media_files)
        writer.write_member(Config.MEDIA_MEMBER_NAME, serialize_media_manifest(manifest))

        for slot, path in enumerate(media_files):
            writer.write_member(str(slot), read_file_bytes(path))

        writer.finish()
    except BaseException:
        writer.abandon()
        raise

    logger.debug(f"Archive complete with {len(writer.members)} members")
    return writer
