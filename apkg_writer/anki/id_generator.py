"""
Timestamp-seeded identifier generation for collection rows.

Anki keys notes and cards with millisecond-timestamp-like integers. Seeding
one ascending counter from the build timestamp keeps a package's identifiers
clear of ones created by ordinary use of Anki, and drawing every identifier
from the same counter keeps them unique within the package.
"""

import logging
import math


logger = logging.getLogger(__name__)


class IdGenerator:
    """
    Infinite ascending sequence of integer identifiers.

    The first value is ``floor(timestamp * 1000)``; each ``next()`` returns
    the current value and advances by one. One instance is shared by every
    deck, note and card written in a single package build.
    """

    def __init__(self, timestamp: float):
        """
        Args:
            timestamp: Seconds since the epoch

        Raises:
            ValueError: If the timestamp is not a finite number
        """
        if not math.isfinite(timestamp):
            raise ValueError(f"Timestamp must be finite, got {timestamp!r}")

        # identifiers are unsigned; clocks before the epoch seed at zero
        self.start = max(0, math.floor(timestamp * 1000))
        self._next = self.start
        logger.debug(f"Identifier generator seeded at {self.start}")

    def __iter__(self):
        return self

    def __next__(self) -> int:
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """Return the next identifier without drawing it."""
        return self._next

    @property
    def drawn(self) -> int:
        """Number of identifiers handed out so far."""
        return self._next - self.start

    def __repr__(self):
        return f"IdGenerator(start={self.start}, next={self._next})"
