"""
Tests for sol_flight/batching.py
"""

import math

import pytest

from sol_flight.batching import chunk, make_batches


class TestChunk:

    @pytest.mark.parametrize("count,size", [(0, 3), (1, 1), (7, 3), (9, 3), (100, 10), (5, 10)])
    def test_group_count_and_sizes(self, count, size):
        items = list(range(count))
        groups = chunk(items, size)

        assert len(groups) == math.ceil(count / size)
        assert all(len(g) == size for g in groups[:-1])
        if groups:
            assert 1 <= len(groups[-1]) <= size

    def test_concatenation_reproduces_input(self):
        items = [f"addr{i}" for i in range(23)]
        groups = chunk(items, 4)
        assert [x for g in groups for x in g] == items

    def test_empty_input_gives_no_groups(self):
        assert chunk([], 5) == []

    def test_works_on_tuples(self):
        assert chunk(("a", "b", "c"), 2) == [["a", "b"], ["c"]]

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError):
            chunk([1, 2, 3], size)


class TestMakeBatches:

    def test_batches_are_indexed_in_input_order(self):
        addresses = [f"addr{i}" for i in range(12)]
        batches = make_batches(addresses, 5)

        assert [b.index for b in batches] == [0, 1, 2]
        assert [len(b) for b in batches] == [5, 5, 2]
        assert batches[1].addresses == tuple(addresses[5:10])

    def test_every_recipient_in_exactly_one_batch(self):
        addresses = [f"addr{i}" for i in range(31)]
        batches = make_batches(addresses, 10)
        flattened = [a for b in batches for a in b.addresses]
        assert flattened == addresses
