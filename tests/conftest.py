"""
Pytest configuration and fixtures for package writer tests.

Provides genanki models and decks, media files on disk and a recording
deck for observing identifier draws.
"""

import math

import genanki
import pytest
from hypothesis import settings, Verbosity

from apkg_writer.config import Config


settings.register_profile("apkg",
    max_examples=50,
    verbosity=Verbosity.normal,
    deadline=None  # each example writes a database
)
settings.load_profile("apkg")


TIMESTAMP = 1600000000.5


class RecordingDeck:
    """Deck stand-in that draws a fixed number of identifiers and inserts notes."""

    def __init__(self, id_count: int):
        self.id_count = id_count
        self.drawn = []
        self.calls = 0

    def write_to_db(self, cursor, timestamp, id_gen):
        self.calls += 1
        for _ in range(self.id_count):
            note_id = next(id_gen)
            self.drawn.append(note_id)
            cursor.execute(
                "INSERT INTO notes VALUES(?,?,?,?,?,?,?,?,?,?,?)",
                (note_id, f"guid{note_id}", 1, int(timestamp), -1, "", "front\x1fback", "front", 0, 0, "")
            )


class FailingDeck(RecordingDeck):
    """Deck stand-in that inserts a note, then fails on a missing table."""

    def __init__(self):
        super().__init__(1)

    def write_to_db(self, cursor, timestamp, id_gen):
        super().write_to_db(cursor, timestamp, id_gen)
        cursor.execute("INSERT INTO no_such_table VALUES (1)")


@pytest.fixture
def timestamp():
    return TIMESTAMP


@pytest.fixture
def first_id():
    return math.floor(TIMESTAMP * 1000)


@pytest.fixture
def basic_model():
    """Provide a simple one-card front/back model."""
    return genanki.Model(
        1607392319,
        'Simple Model',
        fields=[{'name': 'Question'}, {'name': 'Answer'}],
        templates=[{
            'name': 'Card 1',
            'qfmt': '{{Question}}',
            'afmt': '{{FrontSide}}<hr id="answer">{{Answer}}',
        }],
    )


@pytest.fixture
def make_deck(basic_model):
    """Build a genanki deck with ``note_count`` one-card notes."""
    def _make_deck(deck_id=2059400110, name='Capitals', note_count=2):
        deck = genanki.Deck(deck_id, name)
        for i in range(note_count):
            deck.add_note(genanki.Note(
                model=basic_model,
                fields=[f'Question {deck_id} {i}', f'Answer {i}']
            ))
        return deck
    return _make_deck


@pytest.fixture
def media_dir(tmp_path):
    """Provide a directory with a few small media files."""
    directory = tmp_path / "media"
    directory.mkdir()
    (directory / "img.png").write_bytes(b"\x89PNG\r\n\x1a\nfake image")
    (directory / "sound.mp3").write_bytes(b"ID3" + bytes(range(256)))
    (directory / "sub").mkdir()
    (directory / "sub" / "img.png").write_bytes(b"another image")
    return directory


@pytest.fixture
def scratch_dir(tmp_path, monkeypatch):
    """Route scratch collection databases into an inspectable directory."""
    directory = tmp_path / "scratch"
    monkeypatch.setattr(Config, "TEMP_DIR", str(directory))
    return directory
