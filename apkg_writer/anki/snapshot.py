"""
Collection database (``collection.anki2``) writing.

The snapshot is a fresh SQLite file holding the fixed Anki schema, the
default collection row and the rows contributed by each deck. Everything is
written inside a single explicit transaction so a failed build never leaves
a half-populated collection behind.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterable, Iterator

from genanki.apkg_col import APKG_COL
from genanki.apkg_schema import APKG_SCHEMA

from ..errors import database_error
from .id_generator import IdGenerator


logger = logging.getLogger(__name__)


def iter_statements(script: str) -> Iterator[str]:
    """
    Split an SQL script into complete statements.

    ``sqlite3.complete_statement`` decides where a statement ends, so
    semicolons inside string literals do not split it.

    Args:
        script: One or more SQL statements separated by semicolons

    Yields:
        Each statement, stripped, including its terminating semicolon
    """
    buffer = ""
    for chunk in script.split(";"):
        buffer += chunk + ";"
        if sqlite3.complete_statement(buffer):
            statement = buffer.strip()
            if statement.rstrip(";").strip():
                yield statement
            buffer = ""

    if buffer.strip().rstrip(";").strip():
        raise sqlite3.OperationalError(f"Incomplete SQL statement: {buffer.strip()[:60]}")


def execute_script(cursor: sqlite3.Cursor, script: str) -> None:
    """
    Execute a multi-statement script on ``cursor`` one statement at a time.

    ``Cursor.executescript`` commits any open transaction first, which would
    break the single-transaction guarantee, so it is not used here.
    """
    for statement in iter_statements(script):
        cursor.execute(statement)


@contextmanager
def open_snapshot(db_path):
    """
    Open a fresh collection database inside one explicit transaction.

    Commits when the block exits cleanly, rolls back on any exception and
    always closes the connection. SQLite errors are raised as DatabaseError.

    Args:
        db_path: Path of the (not yet existing) database file

    Yields:
        sqlite3.Cursor bound to the open transaction
    """
    context = {'db_path': str(db_path)}

    try:
        # transactions are controlled explicitly below
        conn = sqlite3.connect(str(db_path), isolation_level=None)
    except sqlite3.Error as e:
        raise database_error(e, context) from e

    try:
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN")
        except sqlite3.Error as e:
            raise database_error(e, context) from e

        try:
            yield cursor
        except sqlite3.Error as e:
            _rollback(conn)
            raise database_error(e, context) from e
        except BaseException:
            _rollback(conn)
            raise

        try:
            conn.commit()
        except sqlite3.Error as e:
            _rollback(conn)
            raise database_error(e, context) from e

        logger.debug(f"Committed collection database {db_path}")
    finally:
        conn.close()


def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        conn.rollback()
        logger.debug("Rolled back collection database transaction")


def write_snapshot(cursor: sqlite3.Cursor, decks: Iterable, timestamp: float) -> IdGenerator:
    """
    Populate an empty collection database.

    Installs the schema and default collection row, then lets each deck
    insert its own rows, drawing identifiers from one shared generator.

    Args:
        cursor: Cursor inside the transaction opened by ``open_snapshot``
        decks: Objects providing ``write_to_db(cursor, timestamp, id_gen)``
        timestamp: Build timestamp in seconds since the epoch

    Returns:
        The identifier generator, advanced past every identifier drawn
    """
    execute_script(cursor, APKG_SCHEMA)
    execute_script(cursor, APKG_COL)

    id_gen = IdGenerator(timestamp)

    for deck in decks:
        deck.write_to_db(cursor, timestamp, id_gen)
        logger.debug(f"Wrote deck {getattr(deck, 'name', deck)!r}")

    logger.debug(f"Drew {id_gen.drawn} identifiers starting at {id_gen.start}")
    return id_gen
