"""
Normalizes raw program-committee and paper records into Reviewer and Paper
tuples, and decorates them with the capacities and demands of a review round.

Reviewer records are mappings with the fields:

    "email":
        unique key of the reviewer.

    "roles", "tags":
        a collection of strings, or a single string with items separated by
        commas, semicolons or whitespace. Reviewers with the "chair" role are
        dropped; the "full" tag marks a senior (full PC) member.

    "given_name", "family_name":
        used for reporting only.

Paper records are mappings with the fields "ID", "Title" and "Status".
Only papers with status "Submitted" take part in the match.
"""

import re
import logging
from collections import namedtuple
from enum import Enum

SUBMITTED_STATUS = "Submitted"
CHAIR_ROLE = "chair"
SENIOR_TAG = "full"

Reviewer = namedtuple(
    "Reviewer",
    [
        "email",
        "given_name",
        "family_name",
        "roles",
        "tags",
        "is_senior",
        "max_load",
    ],
)

Paper = namedtuple("Paper", ["id", "title", "status", "num_reviews"])

RoundPolicy = namedtuple(
    "RoundPolicy", ["num_reviews", "senior_max_load", "standard_max_load"]
)


class Round(Enum):
    R1 = "R1"
    R2 = "R2"
    DL = "DL"

    @property
    def action(self):
        """Action recorded in the exported assignment table."""
        if self is Round.DL:
            return "lead"
        return "primaryreview"


ROUND_POLICIES = {
    Round.R1: RoundPolicy(
        num_reviews=2, senior_max_load=7, standard_max_load=3
    ),
    Round.R2: RoundPolicy(
        num_reviews=2, senior_max_load=12, standard_max_load=5
    ),
    Round.DL: RoundPolicy(
        num_reviews=1, senior_max_load=2, standard_max_load=1
    ),
}

_ITEM_SEPARATOR = re.compile(r"[,;\s]+")


def _as_set(value):
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset(
            item for item in _ITEM_SEPARATOR.split(value.strip()) if item
        )
    return frozenset(str(item).strip() for item in value)


def reviewer_name(reviewer):
    return "{} {}".format(
        reviewer.given_name or "", reviewer.family_name or ""
    ).strip()


def normalize_reviewers(records, logger=logging.getLogger(__name__)):
    """Return Reviewer tuples for every record that does not belong to a chair."""
    reviewers = []
    for record in records:
        roles = _as_set(record.get("roles"))
        if CHAIR_ROLE in roles:
            logger.debug("Skipping chair {}".format(record.get("email")))
            continue

        tags = _as_set(record.get("tags"))
        reviewers.append(
            Reviewer(
                email=record["email"],
                given_name=record.get("given_name") or "",
                family_name=record.get("family_name") or "",
                roles=roles,
                tags=tags,
                is_senior=SENIOR_TAG in tags,
                max_load=None,
            )
        )

    logger.debug("Count of reviewers={}".format(len(reviewers)))
    return reviewers


def normalize_papers(records, logger=logging.getLogger(__name__)):
    """Return Paper tuples for every submitted paper."""
    papers = [
        Paper(
            id=record["ID"],
            title=record.get("Title") or "",
            status=record["Status"],
            num_reviews=None,
        )
        for record in records
        if record.get("Status") == SUBMITTED_STATUS
    ]
    logger.debug("Count of submitted papers={}".format(len(papers)))
    return papers


def get_round_policy(round_id, r2_num_reviews=None):
    """
    Look up the capacity/demand policy of a round.

    `round_id` may be a Round or its string value; anything else raises
    ValueError. The number of reviews per paper in R2 is supplied by the
    deployment through `r2_num_reviews` and falls back to the R1 count.
    """
    round_id = Round(round_id)
    policy = ROUND_POLICIES[round_id]
    if round_id is Round.R2 and r2_num_reviews is not None:
        policy = policy._replace(num_reviews=int(r2_num_reviews))
    return policy


def apply_round_policy(reviewers, papers, policy):
    """Return copies of `reviewers` and `papers` decorated with max_load and num_reviews."""
    decorated_reviewers = [
        reviewer._replace(
            max_load=policy.senior_max_load
            if reviewer.is_senior
            else policy.standard_max_load
        )
        for reviewer in reviewers
    ]
    decorated_papers = [
        paper._replace(num_reviews=policy.num_reviews) for paper in papers
    ]
    return decorated_reviewers, decorated_papers


def normalize_records(
    reviewer_records,
    paper_records,
    round_id,
    r2_num_reviews=None,
    logger=logging.getLogger(__name__),
):
    policy = get_round_policy(round_id, r2_num_reviews=r2_num_reviews)
    logger.info("Using round={} policy={}".format(Round(round_id).value, policy))
    return apply_round_policy(
        normalize_reviewers(reviewer_records, logger=logger),
        normalize_papers(paper_records, logger=logger),
        policy,
    )
