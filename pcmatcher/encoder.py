"""
Responsible for:
1) encoding reviewers, papers and their scores into matrices for the solvers.
2) decoding the result of a solver into Assignment tuples.
"""

from collections import namedtuple
import logging
import numpy as np

SCORE_TYPES = ("preference", "affinity", "external")

ScoreCell = namedtuple(
    "ScoreCell",
    [
        "email",
        "paper",
        "preference",
        "affinity",
        "external_score",
        "score",
        "conflict",
    ],
)

Assignment = namedtuple("Assignment", ["email", "paper", "score"])


class EncoderError(Exception):
    """Exception wrapper class for errors related to Encoder"""

    pass


class Encoder:
    """
    Responsible for keeping track of paper and reviewer indexes.

    Every matrix has shape (#papers, #reviewers).

    Arguments:
    - `reviewers`:
        a list of Reviewer tuples.

    - `papers`:
        a list of Paper tuples.

    - `preferences`:
        a dict of PreferenceEntry, keyed on (email, paper ID).

    - `external_scores`:
        a dict of floats, keyed on (email, paper ID).

    - `weight_by_type`:
        an optional dict keyed on the names in SCORE_TYPES. The composite
        score is the weighted mean of the score types; by default every type
        has weight 1.
    """

    def __init__(
        self,
        reviewers,
        papers,
        preferences,
        external_scores,
        weight_by_type=None,
        logger=logging.getLogger(__name__),
    ):
        self.logger = logger

        if len(reviewers) == 0:
            raise EncoderError("Reviewers List can not be empty.")

        if len(papers) == 0:
            raise EncoderError("Papers List can not be empty.")

        self.reviewers = list(reviewers)
        self.papers = list(papers)
        unknown_types = set(weight_by_type or {}) - set(SCORE_TYPES)
        if unknown_types:
            raise EncoderError(
                "Unknown score types {}. Choose from: {}".format(
                    sorted(unknown_types), list(SCORE_TYPES)
                )
            )
        self.weight_by_type = {score_type: 1.0 for score_type in SCORE_TYPES}
        self.weight_by_type.update(weight_by_type or {})

        self.index_by_user = {r.email: i for i, r in enumerate(self.reviewers)}
        self.index_by_forum = {p.id: i for i, p in enumerate(self.papers)}

        self.logger.debug("Init encoding")
        self.matrix_shape = (len(self.papers), len(self.reviewers))

        self.preference_matrix = np.zeros(self.matrix_shape, dtype=float)
        self.affinity_matrix = np.zeros(self.matrix_shape, dtype=float)
        self.constraint_matrix = np.zeros(self.matrix_shape, dtype=int)
        self._encode_preferences(preferences)

        self.external_matrix = self._encode_scores(external_scores)

        self.score_matrices = {
            "preference": self.preference_matrix,
            "affinity": self.affinity_matrix,
            "external": self.external_matrix,
        }

        total_weight = sum(self.weight_by_type.values())
        if total_weight <= 0:
            raise EncoderError(
                "Score weights must add up to a positive number, got {}".format(
                    self.weight_by_type
                )
            )

        # don't use numpy.sum() here. it will collapse the matrices into a single value.
        self.aggregate_score_matrix = (
            sum(
                [
                    scores * self.weight_by_type[score_type]
                    for score_type, scores in self.score_matrices.items()
                ]
            )
            / total_weight
        )

        self.logger.debug(
            "Encoded {} papers x {} reviewers, {} conflicted cells".format(
                len(self.papers),
                len(self.reviewers),
                int(np.sum(self.constraint_matrix == -1)),
            )
        )

    def _coordinates(self, email, paper):
        """return (paper_index, reviewer_index), or None if either is unknown."""
        paper_index = self.index_by_forum.get(paper)
        reviewer_index = self.index_by_user.get(email)
        if paper_index is None or reviewer_index is None:
            return None
        return paper_index, reviewer_index

    def _encode_preferences(self, preferences):
        unknown = 0
        for (email, paper), entry in preferences.items():
            coordinates = self._coordinates(email, paper)
            if coordinates is None:
                unknown += 1
                continue

            self.preference_matrix[coordinates] = entry.preference
            self.affinity_matrix[coordinates] = entry.affinity
            if entry.conflict:
                self.constraint_matrix[coordinates] = -1

        if unknown:
            self.logger.debug(
                "Ignored {} preferences for papers outside the match".format(
                    unknown
                )
            )

    def _encode_scores(self, scores):
        """return a matrix containing unweighted scores."""
        score_matrix = np.zeros(self.matrix_shape, dtype=float)
        for (email, paper), score in scores.items():
            coordinates = self._coordinates(email, paper)
            if coordinates is not None:
                score_matrix[coordinates] = score

        return score_matrix

    def _score_cell(self, paper_index, reviewer_index):
        coordinates = (paper_index, reviewer_index)
        return ScoreCell(
            email=self.reviewers[reviewer_index].email,
            paper=self.papers[paper_index].id,
            preference=float(self.preference_matrix[coordinates]),
            affinity=float(self.affinity_matrix[coordinates]),
            external_score=float(self.external_matrix[coordinates]),
            score=float(self.aggregate_score_matrix[coordinates]),
            conflict=bool(self.constraint_matrix[coordinates] == -1),
        )

    def score_cell(self, email, paper):
        coordinates = self._coordinates(email, paper)
        if coordinates is None:
            raise EncoderError(
                "No score for reviewer {} and paper {}".format(email, paper)
            )
        return self._score_cell(*coordinates)

    def score_cells(self):
        """Return a ScoreCell for every (reviewer, paper) pair, reviewer by reviewer."""
        return [
            self._score_cell(paper_index, reviewer_index)
            for reviewer_index in range(len(self.reviewers))
            for paper_index in range(len(self.papers))
        ]

    def decode_assignments(self, flow_matrix):
        """
        Return a list of Assignment tuples, paper by paper, for every cell
        of `flow_matrix` with flow.
        """
        assignments = []
        for paper_index, paper_flows in enumerate(flow_matrix):
            paper_id = self.papers[paper_index].id
            for reviewer_index, flow in enumerate(paper_flows):
                if flow:
                    assignments.append(
                        Assignment(
                            email=self.reviewers[reviewer_index].email,
                            paper=paper_id,
                            score=float(
                                self.aggregate_score_matrix[
                                    paper_index, reviewer_index
                                ]
                            ),
                        )
                    )

        return assignments
