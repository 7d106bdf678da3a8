"""
Media manifest building.

Every media file in a package is stored under a numeric slot. The ``media``
member maps each slot (as a decimal string) to the file's original base
name, which is the name notes refer to in ``[sound:...]`` and ``<img>``
markup.
"""

import json
import logging
import os
from typing import Any, Dict, List, Sequence

from ..errors import encoding_error, path_format_error


logger = logging.getLogger(__name__)


def normalize_media_path(path: Any) -> str:
    """
    Convert a media path argument to a text path.

    Args:
        path: str, bytes or os.PathLike

    Returns:
        The path as a str

    Raises:
        PathFormatError: If ``path`` is not a usable file path
    """
    try:
        fs_path = os.fspath(path)
    except TypeError:
        raise path_format_error(path, "Not a file path") from None

    # undecodable bytes survive as surrogates and are reported when encoding
    text_path = os.fsdecode(fs_path)

    if not text_path:
        raise path_format_error(path, "Empty file path")
    if "\x00" in text_path:
        raise path_format_error(path, "File path contains a NUL character")

    return text_path


def normalize_media_paths(paths: Sequence[Any]) -> List[str]:
    """Normalize every path in ``paths``, preserving order."""
    return [normalize_media_path(path) for path in paths]


def media_base_name(path: str) -> str:
    """
    Extract the base file name of a media path.

    Raises:
        PathFormatError: If the path has no file name component
        EncodingError: If the name is not representable as UTF-8 text
    """
    name = os.path.basename(path)
    if not name or name in (".", ".."):
        raise path_format_error(path, "Path has no file name")

    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise encoding_error(e, {'path': path}) from e

    return name


def build_media_manifest(media_files: Sequence[str]) -> Dict[str, str]:
    """
    Assign each media file a slot and map the slot to its base name.

    Slots follow input order. Two paths may share a base name; they still
    get distinct slots.

    Args:
        media_files: Normalized media file paths

    Returns:
        Dict mapping "0".."N-1" to base file names, in slot order
    """
    manifest = {str(slot): media_base_name(path) for slot, path in enumerate(media_files)}
    logger.debug(f"Built media manifest with {len(manifest)} entries")
    return manifest


def serialize_media_manifest(manifest: Dict[str, str]) -> bytes:
    """
    Serialize the manifest to UTF-8 JSON.

    Raises:
        EncodingError: If the manifest cannot be serialized
    """
    try:
        return json.dumps(manifest, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        # UnicodeEncodeError is a ValueError
        raise encoding_error(e) from e
