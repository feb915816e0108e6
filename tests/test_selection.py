import itertools
import random
from collections import Counter

import pytest

from giveaway_bot.selection import select_winners


@pytest.mark.parametrize("size", [0, 1, 2, 3, 5, 10, 25])
@pytest.mark.parametrize("count", [1, 2, 3, 5, 20])
def test_returns_min_of_size_and_count_distinct_entrants(size, count):
    entrants = [f"user{i}" for i in range(size)]

    winners = select_winners(entrants, count, random.Random(size * 100 + count))

    assert len(winners) == min(size, count)
    assert len(set(winners)) == len(winners)
    assert set(winners) <= set(entrants)


def test_input_sequence_is_not_modified():
    entrants = list(range(10))

    select_winners(entrants, 5, random.Random(1))

    assert entrants == list(range(10))


def test_same_seed_gives_same_winners():
    entrants = list(range(50))

    first = select_winners(entrants, 5, random.Random(42))
    second = select_winners(entrants, 5, random.Random(42))

    assert first == second


def test_rejects_non_positive_count():
    with pytest.raises(ValueError):
        select_winners([1, 2, 3], 0)


def test_default_random_source_is_used_when_none_given():
    winners = select_winners(["a", "b", "c"], 2)

    assert len(winners) == 2
    assert set(winners) <= {"a", "b", "c"}


def test_all_pairs_are_roughly_equally_likely():
    entrants = ["A", "B", "C", "D", "E"]
    rng = random.Random(1234)
    trials = 20_000

    counts = Counter(
        frozenset(select_winners(entrants, 2, rng)) for _ in range(trials)
    )

    expected_subsets = {frozenset(pair) for pair in itertools.combinations(entrants, 2)}
    assert set(counts) == expected_subsets
    expected = trials / len(expected_subsets)
    for subset, seen in counts.items():
        assert abs(seen - expected) < expected * 0.1, subset
