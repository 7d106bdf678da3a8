"""
Command line entry point for the Anki package writer.

Builds an .apkg file from a tab-separated notes file and media files.
"""

import argparse
import hashlib
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import genanki

from .anki import BasicCardTemplate, CardFormatter, Package, PackageValidator
from .anki.media import media_base_name, normalize_media_path
from .config import Config
from .errors import ApkgWriterError, InputValidationError, error_handler


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def deck_id_for_name(deck_name: str) -> int:
    """
    Derive a stable deck ID from the deck name.

    Re-importing a package built with the same deck name updates the same
    deck in Anki instead of creating a new one.
    """
    hash_object = hashlib.md5(deck_name.encode('utf-8'))
    return int(hash_object.hexdigest()[:8], 16) % 2147483647


def read_notes_file(notes_path: Path) -> List[Tuple[str, str, Optional[str]]]:
    """
    Read ``front<TAB>back[<TAB>media file]`` rows.

    Blank lines and lines starting with ``#`` are skipped. Media paths are
    resolved relative to the notes file.

    Raises:
        InputValidationError: If any row is malformed
        OSError: If the file cannot be read
    """
    rows = []
    problems = []

    with open(notes_path, encoding='utf-8') as f:
        for line_number, line in enumerate(f, 1):
            line = line.rstrip('\r\n')
            if not line.strip() or line.startswith('#'):
                continue

            columns = line.split('\t')
            if len(columns) not in (2, 3):
                problems.append(f"line {line_number}: expected 2 or 3 columns, got {len(columns)}")
                continue

            front, back = columns[0], columns[1]
            if not front.strip() or not back.strip():
                problems.append(f"line {line_number}: empty front or back")
                continue

            media = None
            if len(columns) == 3 and columns[2].strip():
                media = str(notes_path.parent / columns[2].strip())

            rows.append((front, back, media))

    if problems:
        raise InputValidationError(
            error_handler.handle_validation_error(problems, {'notes_file': str(notes_path)})
        )

    return rows


def build_package(rows: List[Tuple[str, str, Optional[str]]], deck_name: str,
                  deck_id: Optional[int] = None, extra_media: Optional[List[str]] = None) -> Package:
    """
    Build a one-deck package from note rows.

    Args:
        rows: (front, back, media path or None) tuples
        deck_name: Name of the deck
        deck_id: Deck ID, derived from the name if None
        extra_media: Media files to include that no row references

    Returns:
        Package ready to be written
    """
    logger = logging.getLogger(__name__)

    if deck_id is None:
        deck_id = deck_id_for_name(deck_name)

    model = BasicCardTemplate.create_model()
    deck = genanki.Deck(deck_id, deck_name)
    media_files = []

    for front, back, media in rows:
        media_name = None
        if media:
            media_path = normalize_media_path(media)
            media_name = media_base_name(media_path)
            if media_path not in media_files:
                media_files.append(media_path)

        fields = CardFormatter.format_note_fields(front, back, media_name)
        deck.add_note(genanki.Note(
            model=model,
            fields=[fields['Front'], fields['Back'], fields['Media']]
        ))

    for media in extra_media or []:
        media_path = normalize_media_path(media)
        if media_path not in media_files:
            media_files.append(media_path)

    logger.info(f"Deck '{deck_name}' (ID: {deck_id}): {len(rows)} notes, {len(media_files)} media files")
    return Package([deck], media_files)


def main(argv: Optional[List[str]] = None) -> int:
    """Build an Anki package from the command line."""
    parser = argparse.ArgumentParser(
        description="Write an Anki .apkg package from tab-separated notes and media files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s capitals.apkg --notes capitals.tsv --deck-name "Capitals"
  %(prog)s capitals.apkg --notes capitals.tsv --media map.png --timestamp 1600000000
  %(prog)s media-only.apkg --media a.mp3 b.mp3

Notes file format:
  One note per line: front<TAB>back[<TAB>media file]
  Media paths are relative to the notes file. Lines starting with # are ignored.
        """
    )

    parser.add_argument(
        "output",
        type=Path,
        help="Path of the .apkg file to write"
    )

    parser.add_argument(
        "--notes",
        type=Path,
        default=None,
        help="Tab-separated notes file"
    )

    parser.add_argument(
        "--deck-name",
        default=Config.DEFAULT_DECK_NAME,
        help=f"Name of the deck (default: {Config.DEFAULT_DECK_NAME!r})"
    )

    parser.add_argument(
        "--deck-id",
        type=int,
        default=None,
        help="Deck ID (derived from the deck name if not given)"
    )

    parser.add_argument(
        "--media",
        nargs='*',
        default=[],
        help="Additional media files to include"
    )

    parser.add_argument(
        "--timestamp",
        type=float,
        default=None,
        help="Fixed build timestamp in seconds, for reproducible output"
    )

    parser.add_argument(
        "--verify",
        action="store_true",
        help="Read the package back and validate it after writing"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    error_handler.clear_errors()

    if args.output.suffix.lower() != Config.PACKAGE_EXTENSION:
        logger.warning(f"Output file does not end in {Config.PACKAGE_EXTENSION}: {args.output}")

    try:
        rows = read_notes_file(args.notes) if args.notes else []
        package = build_package(rows, args.deck_name, args.deck_id, args.media)

        if args.timestamp is None:
            package.write_to_file(args.output)
        else:
            package.write_to_file_timestamp(args.output, args.timestamp)

    except ApkgWriterError as e:
        error_handler.add_error(e.processing_error)
    except OSError as e:
        error_handler.add_error(error_handler.handle_io_error(e, {'notes_file': str(args.notes)}))

    if not error_handler.has_errors() and args.verify:
        if not PackageValidator.validate_package(str(args.output)):
            print(f"❌ Package failed validation: {args.output}")
            return 1

    if error_handler.has_errors():
        summary = error_handler.get_error_summary()
        print(f"❌ Failed to write package ({summary['error_count']} error(s))")
        for error in summary['errors']:
            print(f"   • [{error['code']}] {error['message']}")
            if error['suggested_actions']:
                print(f"     Suggestion: {error['suggested_actions'][0]}")
        return 1

    print(f"✅ Wrote {args.output} ({len(rows)} notes, {len(package.media_files)} media files)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
