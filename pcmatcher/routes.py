"""
Implements the Flask API endpoints.

Every request builds its own Matcher, so no solver state is shared between
requests.
"""
import flask
from flask_cors import CORS

from .core import Matcher, MatcherError
from .encoder import EncoderError
from .report import assignment_rows, detail_rows
from .solvers import SolverException

BLUEPRINT = flask.Blueprint("match", __name__)
CORS(BLUEPRINT, supports_credentials=True)


def _stringify_keys(summary):
    return {
        name: {str(k): v for k, v in value.items()}
        if isinstance(value, dict)
        else value
        for name, value in summary.items()
    }


@BLUEPRINT.route("/match/test")
def test():
    """Test endpoint."""
    flask.current_app.logger.info("In test")
    return "PC Matcher"


@BLUEPRINT.route("/match", methods=["POST"])
def match():
    """Runs a match over the records in the request body and returns the assignment."""

    flask.current_app.logger.debug("Match request received")
    config = flask.current_app.config
    result = {}

    try:
        body = flask.request.get_json(silent=True)
        if not isinstance(body, dict):
            raise MatcherError("Request body must be a JSON object")

        solver_class = body.get("solver", config["DEFAULT_SOLVER"])
        datasource = {
            "reviewers": body.get("reviewers", []),
            "papers": body.get("papers", []),
            "preferences": body.get("preferences", []),
            "external_scores": body.get("external_scores", []),
            "aliases": body.get("aliases", []),
            "conflicts": body.get("conflicts", []),
            "round_id": body.get("round", config["DEFAULT_ROUND"]),
            "r2_num_reviews": body.get("r2_num_reviews", config["R2_NUM_REVIEWS"]),
            "time_limit": config["SOLVER_TIME_LIMIT"],
        }

        flask.current_app.logger.debug(
            "Solver class {} selected for round {}".format(
                solver_class, datasource["round_id"]
            )
        )

        matcher = Matcher(
            datasource=datasource,
            solver_class=solver_class,
            logger=flask.current_app.logger,
        )
        match_result = matcher.solve()

        result["round"] = match_result.round.value
        result["assignments"] = assignment_rows(
            match_result.assignments, match_result.round
        )
        result["details"] = detail_rows(
            match_result.assignments,
            match_result.score_cells,
            match_result.reviewers,
            match_result.papers,
        )
        result["summary"] = _stringify_keys(match_result.summary)

    except (MatcherError, EncoderError, SolverException, KeyError) as error_handle:
        flask.current_app.logger.error(str(error_handle))
        result["error"] = str(error_handle)
        return flask.jsonify(result), 400

    # pylint:disable=broad-except
    except Exception as error_handle:
        flask.current_app.logger.error(str(error_handle))
        result["error"] = "Internal server error: {}".format(error_handle)
        return flask.jsonify(result), 500

    else:
        flask.current_app.logger.debug(
            "POST returns {} assignments".format(len(result["assignments"]))
        )
        return flask.jsonify(result), 200
