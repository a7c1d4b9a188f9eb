import numpy as np
import pytest

from pcmatcher.preferences import (
    map_bid,
    normalize_affinities,
    build_preference_entries,
    to_number,
)


@pytest.mark.parametrize(
    "bid, expected",
    [
        (20, (1.0, False)),
        (100, (1.0, False)),
        (19.5, (0.75, False)),
        (5, (0.75, False)),
        (0, (0.0, False)),
        (-10, (0.0, False)),
        (-998, (0.0, False)),
        (-999, (0.0, True)),
        (-1000, (0.0, True)),
        (None, (0.0, False)),
        ("", (0.0, False)),
        ("not a number", (0.0, False)),
        ("20", (1.0, False)),
    ],
)
def test_map_bid(bid, expected):
    assert map_bid(bid) == expected


def test_conflict_marker_overrides_bid():
    assert map_bid(20, "conflict") == (1.0, True)
    assert map_bid(5, "Conflict") == (0.75, False)


def test_to_number_defaults():
    assert to_number(None) == 0.0
    assert to_number(float("nan")) == 0.0
    assert to_number("3.5") == 3.5
    assert to_number("x", default=-1) == -1


def test_normalize_affinities_range():
    result = normalize_affinities([2, 4, 6])
    np.testing.assert_allclose(result, [0.0, 0.5, 1.0])


def test_equal_affinities_normalize_to_zero():
    np.testing.assert_array_equal(normalize_affinities([3, 3, 3]), [0, 0, 0])
    np.testing.assert_array_equal(normalize_affinities([7]), [0])
    assert normalize_affinities([]).size == 0


def test_build_preference_entries(preference_records):
    emails = ["alice@example.org", "bob@example.org", "carol@example.org"]
    entries = build_preference_entries(preference_records, emails)

    # dave is not a PC member, so his entry is dropped and does not stretch the range
    assert len(entries) == 5
    assert ("dave@example.org", 1) not in entries

    alice_1 = entries[("alice@example.org", 1)]
    assert alice_1.preference == 1.0
    assert alice_1.affinity == 1.0
    assert not alice_1.conflict

    bob_1 = entries[("bob@example.org", 1)]
    assert bob_1.preference == 0.75
    assert bob_1.affinity == pytest.approx(0.5)

    bob_2 = entries[("bob@example.org", 2)]
    assert bob_2.preference == 0.0
    assert bob_2.conflict


def test_first_duplicate_entry_wins():
    records = [
        {"email": "a@example.org", "paper": 1, "topic_score": 1, "preference": 20},
        {"email": "a@example.org", "paper": 1, "topic_score": 2, "preference": -1000},
    ]
    entries = build_preference_entries(records, ["a@example.org"])
    assert len(entries) == 1
    assert entries[("a@example.org", 1)].preference == 1.0
    assert not entries[("a@example.org", 1)].conflict
