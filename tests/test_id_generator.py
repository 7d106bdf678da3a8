"""
Tests for timestamp-seeded identifier generation.
"""

import math

import pytest
from hypothesis import given, strategies as st

from apkg_writer.anki.id_generator import IdGenerator


class TestIdGenerator:
    """Test the identifier sequence."""

    def test_first_value_is_milliseconds(self):
        """The first identifier is the timestamp in whole milliseconds."""
        id_gen = IdGenerator(1600000000.5)
        assert next(id_gen) == 1600000000500

    def test_fractional_milliseconds_are_floored(self):
        """Sub-millisecond fractions are dropped, not rounded."""
        id_gen = IdGenerator(1.0009)
        assert next(id_gen) == 1000

    def test_values_advance_by_one(self):
        """Each draw returns the next consecutive integer."""
        id_gen = IdGenerator(10.0)
        assert [next(id_gen) for _ in range(4)] == [10000, 10001, 10002, 10003]

    def test_peek_does_not_draw(self):
        """peek() reports the next value without consuming it."""
        id_gen = IdGenerator(2.0)
        assert id_gen.peek() == 2000
        assert id_gen.peek() == 2000
        assert next(id_gen) == 2000
        assert id_gen.peek() == 2001

    def test_drawn_counts_values(self):
        """drawn tracks how many identifiers were handed out."""
        id_gen = IdGenerator(3.0)
        assert id_gen.drawn == 0
        next(id_gen)
        next(id_gen)
        assert id_gen.drawn == 2
        assert id_gen.start == 3000

    def test_is_an_iterator(self):
        """The generator can be consumed with standard iteration tools."""
        id_gen = IdGenerator(0.0)
        assert iter(id_gen) is id_gen
        assert list(zip(range(3), id_gen)) == [(0, 0), (1, 1), (2, 2)]

    def test_zero_timestamp(self):
        """A zero clock seeds at zero."""
        assert next(IdGenerator(0.0)) == 0

    def test_negative_timestamp_saturates_at_zero(self):
        """Identifiers are never negative."""
        id_gen = IdGenerator(-5.0)
        assert next(id_gen) == 0
        assert next(id_gen) == 1

    @pytest.mark.parametrize("timestamp", [float('nan'), float('inf'), float('-inf')])
    def test_non_finite_timestamp_rejected(self, timestamp):
        """NaN and infinite timestamps cannot seed a sequence."""
        with pytest.raises(ValueError):
            IdGenerator(timestamp)

    def test_independent_generators(self):
        """Two generators with the same seed do not share state."""
        first = IdGenerator(1.0)
        second = IdGenerator(1.0)
        next(first)
        next(first)
        assert next(second) == 1000

    @given(
        timestamp=st.floats(min_value=0, max_value=4e9, allow_nan=False),
        count=st.integers(min_value=1, max_value=200)
    )
    def test_strictly_increasing_and_unique(self, timestamp, count):
        """Property: draws are unique, strictly increasing and start at the seed."""
        id_gen = IdGenerator(timestamp)
        values = [next(id_gen) for _ in range(count)]

        assert values[0] == math.floor(timestamp * 1000)
        assert all(b == a + 1 for a, b in zip(values, values[1:]))
        assert len(set(values)) == count
