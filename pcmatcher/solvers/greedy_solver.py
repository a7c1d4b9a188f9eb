"""
A single-pass greedy paper-reviewer assignment solver.

Candidate (paper, reviewer) cells are ranked by aggregate score, highest
first, and committed first-fit as long as the reviewer has capacity left, the
paper still needs reviews, and the reviewer is not conflicted with anyone
already assigned to the paper. There is no backtracking, so an early
commitment can starve a later paper even when another assignment would have
covered every paper. OptimalSolver offers the exact alternative behind the
same interface.

GreedySolver is initialized with the following arguments:

    "maximums":
        a list of integers of length #reviewers: the maximum number of
        papers each reviewer can be assigned.

    "demands":
        a list of integers of length #papers: the number of reviews each
        paper must receive.

    "encoder":
        an object with `aggregate_score_matrix` and `constraint_matrix`
        (#papers by #reviewers numpy arrays; a constraint of -1 forbids the
        pair) and the `reviewers` and `papers` lists they index.

    "conflicts":
        a ConflictSet of reviewer pairs that must not share a paper.

    "time_limit":
        optional number of seconds after which the scan is abandoned.
"""

import logging
import numbers
import time
from collections import defaultdict
import numpy as np

from .core import SolverException, InfeasibleAssignmentError
from ..conflicts import ConflictSet


def _id_key(value):
    """Sort key for paper IDs: numbers (or numeric strings) numerically, before strings."""
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return (0, value, "")
    if isinstance(value, str):
        for cast in (int, float):
            try:
                number = cast(value.strip())
            except ValueError:
                continue
            if number == number:
                return (0, number, "")
            break
    return (1, 0, str(value))


class GreedySolver:
    """Greedy maximum-score-first assignment with first-fit commitment."""

    def __init__(
        self,
        maximums,
        demands,
        encoder,
        conflicts=None,
        time_limit=None,
        logger=logging.getLogger(__name__),
    ):
        self.logger = logger
        self.maximums = list(maximums)
        self.demands = list(demands)
        self.score_matrix = np.asarray(encoder.aggregate_score_matrix, dtype=float)
        self.constraint_matrix = np.asarray(encoder.constraint_matrix)
        self.reviewer_ids = [reviewer.email for reviewer in encoder.reviewers]
        self.paper_ids = [paper.id for paper in encoder.papers]
        self.conflicts = conflicts if conflicts is not None else ConflictSet()
        self.time_limit = time_limit

        self.num_papers, self.num_reviewers = self.score_matrix.shape
        self.solved = False
        self.flow_matrix = None
        self.cost = None

        self._check_inputs()

    def _check_inputs(self):
        """Validate inputs (e.g. that matrix and array dimensions are correct)"""
        self.logger.debug("Checking greedy solver inputs")

        if not np.shape(self.score_matrix) == np.shape(self.constraint_matrix):
            raise SolverException(
                "score {} and constraint {} matrices must be the same shape".format(
                    np.shape(self.score_matrix), np.shape(self.constraint_matrix)
                )
            )

        if not len(self.maximums) == self.num_reviewers == len(self.reviewer_ids):
            raise SolverException(
                "maximums ({}) must be same length as number of reviewers ({})".format(
                    len(self.maximums), self.num_reviewers
                )
            )

        if not len(self.demands) == self.num_papers == len(self.paper_ids):
            raise SolverException(
                "demands ({}) must be same length as number of papers ({})".format(
                    len(self.demands), self.num_papers
                )
            )

        supply = sum(self.maximums)
        demand = sum(self.demands)
        if supply < demand:
            self.logger.debug(
                "Total demand ({}) exceeds total review supply ({})".format(
                    demand, supply
                )
            )

    def ranked_cells(self):
        """
        Return the non-conflicted (paper_index, reviewer_index) cells,
        best score first. Ties are broken by reviewer email, then paper ID.
        """
        candidates = zip(*np.nonzero(self.constraint_matrix != -1))
        return sorted(
            ((int(p), int(r)) for p, r in candidates),
            key=lambda cell: (
                -self.score_matrix[cell],
                str(self.reviewer_ids[cell[1]]),
                _id_key(self.paper_ids[cell[0]]),
            ),
        )

    def solve(self):
        """
        Run the greedy scan and return a #papers by #reviewers matrix with a 1
        for every assigned pair.

        Raises InfeasibleAssignmentError if any paper is left with fewer
        reviews than it needs.
        """
        self.solved = False
        start_time = time.time()

        loads = np.zeros(self.num_reviewers, dtype=int)
        coverage = np.zeros(self.num_papers, dtype=int)
        assigned_by_paper = defaultdict(list)
        flow_matrix = np.zeros((self.num_papers, self.num_reviewers), dtype=int)

        ranked = self.ranked_cells()
        self.logger.debug("Scanning {} candidate cells".format(len(ranked)))

        for paper_index, reviewer_index in ranked:
            if (
                self.time_limit is not None
                and time.time() - start_time > self.time_limit
            ):
                raise SolverException(
                    "Greedy solver exceeded the time limit of {} seconds".format(
                        self.time_limit
                    )
                )

            if loads[reviewer_index] >= self.maximums[reviewer_index]:
                continue
            if coverage[paper_index] >= self.demands[paper_index]:
                continue

            reviewer = self.reviewer_ids[reviewer_index]
            if any(
                self.conflicts.are_conflicted(reviewer, other)
                for other in assigned_by_paper[paper_index]
            ):
                continue

            flow_matrix[paper_index, reviewer_index] = 1
            assigned_by_paper[paper_index].append(reviewer)
            loads[reviewer_index] += 1
            coverage[paper_index] += 1

        underserved = [
            self.paper_ids[paper_index]
            for paper_index in range(self.num_papers)
            if coverage[paper_index] < self.demands[paper_index]
        ]
        if underserved:
            self.logger.debug("Underserved papers={}".format(underserved))
            raise InfeasibleAssignmentError(
                "Could not assign enough reviewers to {} papers. "
                "Try adjusting constraints (raise reviewer capacities "
                "or loosen conflicts).".format(len(underserved)),
                underserved_papers=underserved,
            )

        self.flow_matrix = flow_matrix
        self.cost = float(np.sum(flow_matrix * self.score_matrix))
        self.solved = True
        self.logger.debug(
            "Greedy solver finished in {} seconds, total score={}".format(
                time.time() - start_time, self.cost
            )
        )
        return self.flow_matrix
