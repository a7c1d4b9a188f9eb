"""A module for paper-reviewer assignment solvers"""

from .core import SolverException, InfeasibleAssignmentError
from .greedy_solver import GreedySolver
from .optimal_solver import OptimalSolver
