import numpy as np
import pytest

from pcmatcher.conflicts import ConflictSet
from pcmatcher.solvers import (
    OptimalSolver,
    GreedySolver,
    InfeasibleAssignmentError,
)
from conftest import build_encoder, check_assignment


def test_optimal_covers_paper_greedy_starves():
    '''
    Same instance as the greedy no-backtracking case:
    b -> 1 and a -> 2 is the only complete assignment.
    '''
    enc = build_encoder(
        [
            [0.9, 0.5],
            [0.8, 0.0],
        ],
        ["a@example.org", "b@example.org"],
        [1, 2],
        constraint_matrix=[[0, 0], [0, -1]],
    )
    with pytest.raises(InfeasibleAssignmentError):
        GreedySolver([1, 1], [1, 1], enc).solve()

    solver = OptimalSolver([1, 1], [1, 1], enc)
    res = solver.solve()
    assert solver.solved
    np.testing.assert_array_equal(res, [[0, 1], [1, 0]])
    assert solver.cost == pytest.approx(1.3)


def test_optimal_maximizes_total_score():
    '''
    Greedy takes a -> 1 (0.9) and leaves b -> 2 (0.1), total 1.0.
    The optimum is a -> 2, b -> 1, total 1.6.
    '''
    enc = build_encoder(
        [
            [0.9, 0.8],
            [0.8, 0.1],
        ],
        ["a@example.org", "b@example.org"],
        [1, 2],
    )
    greedy = GreedySolver([1, 1], [1, 1], enc)
    greedy.solve()
    assert greedy.cost == pytest.approx(1.0)

    solver = OptimalSolver([1, 1], [1, 1], enc)
    res = solver.solve()
    np.testing.assert_array_equal(res, [[0, 1], [1, 0]])
    assert solver.cost == pytest.approx(1.6)


def test_optimal_respects_conflicts_and_capacities():
    enc = build_encoder(
        [
            [0.9, 0.8, 0.1, 0.2],
            [0.0, 0.5, 0.6, 0.4],
            [0.3, 0.3, 0.3, 0.9],
        ],
        ["a@example.org", "b@example.org", "c@example.org", "d@example.org"],
        [1, 2, 3],
    )
    conflicts = ConflictSet([("a@example.org", "b@example.org")])
    maximums = [2, 1, 2, 1]
    demands = [2, 2, 2]
    res = OptimalSolver(maximums, demands, enc, conflicts=conflicts).solve()

    check_assignment(res, maximums, demands)
    for paper_flows in res:
        assert not (paper_flows[0] and paper_flows[1])


def test_optimal_rejects_insufficient_supply():
    enc = build_encoder([[0.5], [0.4]], ["a@example.org"], [1, 2])
    with pytest.raises(
        InfeasibleAssignmentError, match="Could not assign enough reviewers to 1 papers"
    ) as excinfo:
        OptimalSolver([1], [1, 1], enc).solve()
    assert excinfo.value.underserved_papers == [2]


def test_optimal_reports_infeasible_papers():
    enc = build_encoder(
        [[0.5, 0.5], [0.5, 0.5]],
        ["a@example.org", "b@example.org"],
        [1, 2],
        constraint_matrix=[[0, 0], [-1, -1]],
    )
    with pytest.raises(
        InfeasibleAssignmentError, match="Could not assign enough reviewers to 1 papers"
    ) as excinfo:
        OptimalSolver([2, 2], [1, 1], enc).solve()
    assert excinfo.value.underserved_papers == [2]


def test_optimal_infeasible_through_conflicts():
    '''Paper 1 needs two reviews but its only two reviewers are conflicted.'''
    enc = build_encoder(
        [[0.5, 0.5]],
        ["a@example.org", "b@example.org"],
        [1],
    )
    conflicts = ConflictSet([("a@example.org", "b@example.org")])
    with pytest.raises(InfeasibleAssignmentError, match="No assignment covers every paper"):
        OptimalSolver([1, 1], [2], enc, conflicts=conflicts).solve()
