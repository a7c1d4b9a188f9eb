class SolverException(Exception):
    """Exception wrapper class for errors related to solvers."""

    pass


class InfeasibleAssignmentError(SolverException):
    """
    Raised when some papers cannot reach their required number of reviews.

    `underserved_papers` holds the IDs of the papers that were left short,
    when the solver is able to name them.
    """

    def __init__(self, message, underserved_papers=None):
        super().__init__(message)
        self.underserved_papers = list(underserved_papers or [])
