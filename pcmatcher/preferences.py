"""
Translates raw bidding records into preference scores and normalized topic
affinities.

Each preference record is a mapping with the fields "email", "paper",
"topic_score", "preference" (the numeric bid) and an optional "conflict"
marker. Missing or non-numeric values count as 0.
"""

import logging
from collections import namedtuple
import numpy as np

EXPERT_BID = 20
CONFLICT_BID = -999
CONFLICT_MARKER = "conflict"

EXPERT_PREFERENCE = 1.0
LIKE_PREFERENCE = 0.75
NO_PREFERENCE = 0.0

PreferenceEntry = namedtuple(
    "PreferenceEntry",
    [
        "email",
        "paper",
        "bid",
        "preference",
        "conflict",
        "topic_score",
        "affinity",
    ],
)


def to_number(value, default=0.0):
    """Convert a raw field to float, falling back to `default` for blanks and junk."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if np.isnan(number):
        return default
    return number


def map_bid(bid, conflict_marker=None):
    """
    Map a raw bid to a (preference, conflict) pair.

    >>> map_bid(20)
    (1.0, False)
    >>> map_bid(5)
    (0.75, False)
    >>> map_bid(-1000)
    (0.0, True)
    """
    bid = to_number(bid)
    conflict = conflict_marker == CONFLICT_MARKER

    if bid >= EXPERT_BID:
        preference = EXPERT_PREFERENCE
    elif bid > 0:
        preference = LIKE_PREFERENCE
    else:
        preference = NO_PREFERENCE

    if bid <= CONFLICT_BID:
        conflict = True

    return preference, conflict


def normalize_affinities(values):
    """
    Min-max normalize raw topic scores into [0, 1].

    When every value is the same (or there is only one), all normalized
    affinities are 0.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return values

    low = values.min()
    span = values.max() - low
    if span == 0:
        return np.zeros_like(values)

    return (values - low) / span


def build_preference_entries(
    records, reviewer_emails, logger=logging.getLogger(__name__)
):
    """
    Return a dict of PreferenceEntry keyed on (email, paper).

    Only records of current PC members are kept, and the topic scores are
    normalized over that whole filtered set. If a pair appears more than once
    the first record wins.
    """
    records = list(records)
    reviewer_emails = set(reviewer_emails)
    kept = [record for record in records if record.get("email") in reviewer_emails]
    logger.debug(
        "Keeping {} of {} preference records".format(len(kept), len(records))
    )

    topic_scores = [to_number(record.get("topic_score")) for record in kept]
    affinities = normalize_affinities(topic_scores)

    entries = {}
    duplicates = 0
    for record, topic_score, affinity in zip(kept, topic_scores, affinities):
        key = (record["email"], record.get("paper"))
        if key in entries:
            duplicates += 1
            continue

        bid = to_number(record.get("preference"))
        preference, conflict = map_bid(bid, record.get("conflict"))
        entries[key] = PreferenceEntry(
            email=record["email"],
            paper=record.get("paper"),
            bid=bid,
            preference=preference,
            conflict=conflict,
            topic_score=topic_score,
            affinity=float(affinity),
        )

    if duplicates:
        logger.warning(
            "Ignored {} duplicate preference records".format(duplicates)
        )

    return entries
