"""
An exact paper-reviewer assignment solver.

Formulates the assignment as an integer program and solves it with the
OR-Tools linear solver wrapper (SCIP backend):

    maximize    sum  score[p, r] * x[p, r]
    subject to  sum_r x[p, r] == demands[p]          for every paper p
                sum_p x[p, r] <= maximums[r]         for every reviewer r
                x[p, a] + x[p, b] <= 1               for every conflict pair (a, b)
                x[p, r] == 0                         where constraint[p, r] == -1

Arguments are the same as GreedySolver. Whenever a feasible assignment exists
it is found, and it has the highest possible total score.
"""

import logging
import time
from itertools import product
import numpy as np
from ortools.linear_solver import pywraplp

from .core import SolverException, InfeasibleAssignmentError
from ..conflicts import ConflictSet


class OptimalSolver:
    """Integer-programming assignment solver."""

    backend = "SCIP"

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
        self.logger.debug("Checking optimal solver inputs")

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

    def _validate_input_range(self):
        """Validate that total demand does not exceed total review supply"""
        self.logger.debug("Checking if demand is in range")

        supply = sum(self.maximums)
        demand = sum(self.demands)

        self.logger.debug(
            "Total demand is ({}) and max review supply is ({})".format(
                demand, supply
            )
        )

        if demand > supply:
            # serve the cheapest papers first; the rest cannot be covered
            underserved = []
            remaining = supply
            for paper_index in sorted(
                range(self.num_papers), key=lambda i: self.demands[i]
            ):
                if self.demands[paper_index] <= remaining:
                    remaining -= self.demands[paper_index]
                else:
                    underserved.append(self.paper_ids[paper_index])
            self.logger.debug("Underserved papers={}".format(underserved))
            raise InfeasibleAssignmentError(
                "Could not assign enough reviewers to {} papers. "
                "Try adjusting constraints (raise reviewer capacities "
                "or loosen conflicts).".format(len(underserved)),
                underserved_papers=underserved,
            )

    def _short_papers(self):
        """Papers with fewer eligible reviewers than reviews required."""
        eligible = np.sum(
            (self.constraint_matrix != -1)
            & (np.array(self.maximums) > 0)[np.newaxis, :],
            axis=1,
        )
        return [
            self.paper_ids[i]
            for i in range(self.num_papers)
            if eligible[i] < self.demands[i]
        ]

    def construct_solver(self):
        """Build the integer program. Returns (solver, variables by cell)."""
        self.logger.debug("construct_solver")
        solver = pywraplp.Solver.CreateSolver(self.backend)
        if solver is None:
            raise SolverException(
                "OR-Tools backend {} is not available".format(self.backend)
            )

        if self.time_limit is not None:
            solver.SetTimeLimit(int(self.time_limit * 1000))

        x = {}
        for i, j in product(range(self.num_papers), range(self.num_reviewers)):
            if self.constraint_matrix[i, j] != -1:
                x[i, j] = solver.BoolVar("x[{}][{}]".format(i, j))

        for i in range(self.num_papers):
            c = solver.Constraint(int(self.demands[i]), int(self.demands[i]))
            for j in range(self.num_reviewers):
                if (i, j) in x:
                    c.SetCoefficient(x[i, j], 1)

        for j in range(self.num_reviewers):
            c = solver.Constraint(0, int(self.maximums[j]))
            for i in range(self.num_papers):
                if (i, j) in x:
                    c.SetCoefficient(x[i, j], 1)

        index_by_user = {r: j for j, r in enumerate(self.reviewer_ids)}
        for email, other_email in self.conflicts:
            a = index_by_user.get(email)
            b = index_by_user.get(other_email)
            if a is None or b is None or a == b:
                continue
            for i in range(self.num_papers):
                if (i, a) in x and (i, b) in x:
                    c = solver.Constraint(0, 1)
                    c.SetCoefficient(x[i, a], 1)
                    c.SetCoefficient(x[i, b], 1)

        objective = solver.Objective()
        for (i, j), var in x.items():
            objective.SetCoefficient(var, float(self.score_matrix[i, j]))
        objective.SetMaximization()

        self.logger.debug("Finished construct_solver with {} variables".format(len(x)))
        return solver, x

    def solve(self):
        """
        Solve the integer program and return a #papers by #reviewers matrix
        with a 1 for every assigned pair.
        """
        self.solved = False
        start_time = time.time()

        self._validate_input_range()
        solver, x = self.construct_solver()

        status = solver.Solve()
        self.logger.debug("Solver status: {}".format(status))

        if status == pywraplp.Solver.FEASIBLE:
            self.logger.warning(
                "Time limit reached before proving optimality; using best assignment found"
            )
        elif status != pywraplp.Solver.OPTIMAL:
            if status == pywraplp.Solver.INFEASIBLE:
                short_papers = self._short_papers()
                if short_papers:
                    message = (
                        "Could not assign enough reviewers to {} papers. "
                        "Try adjusting constraints (raise reviewer capacities "
                        "or loosen conflicts).".format(len(short_papers))
                    )
                else:
                    message = (
                        "No assignment covers every paper under the current "
                        "capacities and conflicts. Try adjusting constraints."
                    )
                raise InfeasibleAssignmentError(
                    message, underserved_papers=short_papers
                )
            raise SolverException(
                "Solver could not find a solution (status {})".format(status)
            )

        flow_matrix = np.zeros((self.num_papers, self.num_reviewers), dtype=int)
        for (i, j), var in x.items():
            if var.solution_value() > 0.5:
                flow_matrix[i, j] = 1

        self.flow_matrix = flow_matrix
        self.cost = float(np.sum(flow_matrix * self.score_matrix))
        self.solved = True
        self.logger.debug(
            "Optimal solver finished in {} seconds, total score={}".format(
                time.time() - start_time, self.cost
            )
        )
        return self.flow_matrix
