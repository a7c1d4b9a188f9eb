"""Contains core matcher functions and classes."""
import logging
import time
from collections import namedtuple
from enum import Enum

from .solvers import (
    SolverException,
    InfeasibleAssignmentError,
    GreedySolver,
    OptimalSolver,
)
from .records import Round, normalize_records
from .preferences import build_preference_entries
from .external_scores import build_alias_map, resolve_external_scores
from .conflicts import ConflictSet
from .encoder import Encoder
from .report import summarize

SOLVER_MAP = {
    "Greedy": GreedySolver,
    "Optimal": OptimalSolver,
}

MatchResult = namedtuple(
    "MatchResult",
    ["round", "reviewers", "papers", "assignments", "score_cells", "summary"],
)


class MatcherStatus(Enum):
    INITIALIZED = "Initialized"
    RUNNING = "Running"
    ERROR = "Error"
    NO_SOLUTION = "No Solution"
    COMPLETE = "Complete"


class MatcherError(Exception):
    """Exception wrapper class for errors related to Matcher."""

    pass


class KeywordDatasource:
    """
    Holds the raw records of one match and receives its results.

    `external_scores` rows are positional (paper, identity, score);
    every other collection is a list of mappings.
    """

    def __init__(
        self,
        reviewers=None,
        papers=None,
        preferences=None,
        external_scores=None,
        aliases=None,
        conflicts=None,
        round_id=Round.R1.value,
        r2_num_reviews=None,
        time_limit=None,
        logger=logging.getLogger(__name__),
    ):
        self.reviewers = reviewers or []
        self.papers = papers or []
        self.preferences = preferences or []
        self.external_scores = external_scores or []
        self.aliases = aliases or []
        self.conflicts = conflicts or []
        self.round_id = round_id
        self.r2_num_reviews = r2_num_reviews
        self.time_limit = time_limit
        self.result = None
        self.logger = logger

    def set_result(self, result):
        self.logger.info(
            "Received {} assignments for round {}".format(
                len(result.assignments), result.round.value
            )
        )
        self.result = result

    def set_status(self, status, message=None):
        self.logger.info("status={0}, message={1}".format(status.value, message))


class Matcher:
    """Main class that coordinates the record normalization, an Encoder and a Solver."""

    def __init__(
        self,
        datasource,
        solver_class="Greedy",
        logger=logging.getLogger(__name__),
    ):
        if isinstance(datasource, dict):
            self.datasource = KeywordDatasource(logger=logger, **datasource)
        else:
            self.datasource = datasource

        self.logger = logger
        self.result = None
        self.status = MatcherStatus.INITIALIZED.value
        self.message = None

        self.solver_class = self.__set_solver_class(solver_class)

    def __set_solver_class(self, solver_class):
        if solver_class not in SOLVER_MAP:
            raise MatcherError(
                "Invalid solver class {}. Choose from: {}".format(
                    solver_class, list(SOLVER_MAP)
                )
            )
        return SOLVER_MAP[solver_class]

    def set_status(self, status, message=None):
        self.status = status.value
        self.message = message
        self.datasource.set_status(status, message=message)

    def get_status(self):
        return self.status

    def solve(self):
        """
        Compute a match of reviewers to papers and return a MatchResult.

        With no eligible papers the result is empty. Raises MatcherError for an
        unknown round and SolverException (InfeasibleAssignmentError) when some
        paper cannot be covered, including when there are no eligible reviewers.
        """
        datasource = self.datasource
        try:
            round_id = Round(datasource.round_id)
        except ValueError:
            raise MatcherError(
                "Invalid round {}. Choose from: {}".format(
                    datasource.round_id, [r.value for r in Round]
                )
            )

        self.logger.debug("Start normalizing records")
        reviewers, papers = normalize_records(
            datasource.reviewers,
            datasource.papers,
            round_id,
            r2_num_reviews=datasource.r2_num_reviews,
            logger=self.logger,
        )

        if not papers:
            self.logger.info("No papers to assign in round {}".format(round_id.value))
            return MatchResult(
                round=round_id,
                reviewers=reviewers,
                papers=papers,
                assignments=[],
                score_cells=[],
                summary=summarize([], [], reviewers, papers),
            )

        if not reviewers:
            underserved = [paper.id for paper in papers if paper.num_reviews > 0]
            raise InfeasibleAssignmentError(
                "Could not assign enough reviewers to {} papers. "
                "Try adjusting constraints (raise reviewer capacities "
                "or loosen conflicts).".format(len(underserved)),
                underserved_papers=underserved,
            )

        reviewer_emails = [reviewer.email for reviewer in reviewers]

        preferences = build_preference_entries(
            datasource.preferences, reviewer_emails, logger=self.logger
        )
        external_scores = resolve_external_scores(
            datasource.external_scores,
            build_alias_map(datasource.aliases),
            logger=self.logger,
        )
        conflicts = ConflictSet.from_records(
            datasource.conflicts, reviewer_emails, logger=self.logger
        )

        self.logger.debug("Start encoding")
        encoder = Encoder(
            reviewers, papers, preferences, external_scores, logger=self.logger
        )

        self.logger.debug("Preparing solver")
        solver = self.solver_class(
            [reviewer.max_load for reviewer in reviewers],
            [paper.num_reviews for paper in papers],
            encoder,
            conflicts=conflicts,
            time_limit=datasource.time_limit,
            logger=self.logger,
        )

        start_time = time.time()
        self.logger.debug("Solving solver")
        flow_matrix = solver.solve()
        self.logger.debug(
            "Complete solver run took {} seconds".format(time.time() - start_time)
        )

        assignments = encoder.decode_assignments(flow_matrix)
        score_cells = encoder.score_cells()
        return MatchResult(
            round=round_id,
            reviewers=reviewers,
            papers=papers,
            assignments=assignments,
            score_cells=score_cells,
            summary=summarize(assignments, score_cells, reviewers, papers),
        )

    def run(self):
        """
        Compute a match and hand it to the datasource.
        The status is set to reflect completion or errors; nothing is raised.
        """
        try:
            self.set_status(MatcherStatus.RUNNING)
            self.result = self.solve()
            self.datasource.set_result(self.result)
            self.set_status(MatcherStatus.COMPLETE, message="")

        except SolverException as error_handle:
            self.logger.debug("No Solution={}".format(error_handle))
            self.set_status(MatcherStatus.NO_SOLUTION, message=str(error_handle))
        except Exception as error_handle:
            self.logger.debug("Error={}".format(error_handle))
            self.set_status(MatcherStatus.ERROR, message=str(error_handle))

        return self.result
