"""
Shared fixtures and helpers for the matcher tests.
"""

from collections import namedtuple
import numpy as np
import pytest

from pcmatcher import create_app
from pcmatcher.records import Reviewer, Paper


def assert_arrays(array_A, array_B, is_string=False):
    if is_string:
        assert all([a == b for a, b in zip(sorted(array_A), sorted(array_B))])
    else:
        assert all(
            [
                float(a) == float(b)
                for a, b in zip(sorted(array_A), sorted(array_B))
            ]
        )


def make_reviewer(email, max_load=None, is_senior=False):
    return Reviewer(
        email=email,
        given_name=email.split("@")[0].title(),
        family_name="Tester",
        roles=frozenset(["pc"]),
        tags=frozenset(["full"]) if is_senior else frozenset(),
        is_senior=is_senior,
        max_load=max_load,
    )


def make_paper(paper_id, num_reviews=None):
    return Paper(
        id=paper_id,
        title="Paper {}".format(paper_id),
        status="Submitted",
        num_reviews=num_reviews,
    )


encoder = namedtuple(
    "Encoder", ["aggregate_score_matrix", "constraint_matrix", "reviewers", "papers"]
)


def build_encoder(score_matrix, emails, paper_ids, constraint_matrix=None):
    """A stand-in for Encoder built straight from a papers x reviewers score matrix."""
    score_matrix = np.array(score_matrix, dtype=float)
    if constraint_matrix is None:
        constraint_matrix = np.zeros(score_matrix.shape, dtype=int)
    return encoder(
        score_matrix,
        np.array(constraint_matrix),
        [make_reviewer(email) for email in emails],
        [make_paper(paper_id) for paper_id in paper_ids],
    )


def check_assignment(flow_matrix, maximums, demands):
    """Every paper covered exactly, and no reviewer over capacity."""
    assert_arrays(flow_matrix.sum(axis=1), demands)
    for load, maximum in zip(flow_matrix.sum(axis=0), maximums):
        assert load <= maximum


@pytest.fixture
def pc_records():
    return [
        {
            "email": "alice@example.org",
            "roles": "pc",
            "tags": "full",
            "given_name": "Alice",
            "family_name": "Adams",
        },
        {
            "email": "bob@example.org",
            "roles": "pc",
            "tags": "",
            "given_name": "Bob",
            "family_name": "Brown",
        },
        {
            "email": "carol@example.org",
            "roles": ["pc"],
            "tags": ["full", "heavy"],
            "given_name": "Carol",
            "family_name": "Clark",
        },
        {
            "email": "dave@example.org",
            "roles": "pc;chair",
            "tags": "full",
            "given_name": "Dave",
            "family_name": "Davis",
        },
    ]


@pytest.fixture
def paper_records():
    return [
        {"ID": 1, "Title": "Greedy matching", "Status": "Submitted"},
        {"ID": 2, "Title": "Flow networks", "Status": "Submitted"},
        {"ID": 3, "Title": "Withdrawn work", "Status": "Withdrawn"},
    ]


@pytest.fixture
def preference_records():
    return [
        {"email": "alice@example.org", "paper": 1, "topic_score": 10, "preference": 20},
        {"email": "alice@example.org", "paper": 2, "topic_score": 0, "preference": 0},
        {"email": "bob@example.org", "paper": 1, "topic_score": 5, "preference": 5},
        {"email": "bob@example.org", "paper": 2, "topic_score": 10, "preference": -1000},
        {"email": "carol@example.org", "paper": 2, "topic_score": 5, "preference": 10,
         "conflict": None},
        {"email": "dave@example.org", "paper": 1, "topic_score": 100, "preference": 50},
    ]


@pytest.fixture
def match_data(pc_records, paper_records, preference_records):
    return {
        "reviewers": pc_records,
        "papers": paper_records,
        "preferences": preference_records,
        "external_scores": [
            (1, "alice-tpms", 0.9),
            (2, "carol@example.org", 0.6),
            (2, "bob@example.org", 0.3),
        ],
        "aliases": [
            {"tpms_email": "alice-tpms", "alias_email": "alice@example.org"},
        ],
        "conflicts": [
            {"email": "alice@example.org", "conflict_email": "carol@example.org"},
        ],
        "round_id": "R1",
    }


@pytest.fixture
def app():
    return create_app(
        config={
            "TESTING": True,
            "ENV": "testing",
            "LOG_FILE": None,
        }
    )


@pytest.fixture
def test_client(app):
    return app.test_client()
