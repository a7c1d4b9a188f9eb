"""
Summary statistics and export rows for a completed assignment.
"""

from collections import Counter

from .preferences import EXPERT_PREFERENCE, LIKE_PREFERENCE, NO_PREFERENCE
from .records import Round, reviewer_name

PREFERENCE_LABELS = {
    EXPERT_PREFERENCE: "Expert",
    LIKE_PREFERENCE: "Like",
    NO_PREFERENCE: "Neutral",
}


def summarize(assignments, score_cells, reviewers=None, papers=None):
    """
    Aggregate statistics over `assignments`.

    Returns a dict with the total number of assignments, the mean assignment
    score, the load of every reviewer, the load distribution (load -> number of
    reviewers with that load), the number of reviews of every paper and the
    preference distribution (preference level -> number of assignments).

    Reviewers and papers without assignments show up with a count of 0 only
    when `reviewers` / `papers` are given.
    """
    cell_by_pair = {(cell.email, cell.paper): cell for cell in score_cells}

    reviewer_loads = Counter({reviewer.email: 0 for reviewer in reviewers or []})
    paper_coverage = Counter({paper.id: 0 for paper in papers or []})
    preference_distribution = Counter({level: 0 for level in PREFERENCE_LABELS})

    for assignment in assignments:
        reviewer_loads[assignment.email] += 1
        paper_coverage[assignment.paper] += 1
        cell = cell_by_pair.get((assignment.email, assignment.paper))
        if cell is not None:
            preference_distribution[cell.preference] += 1

    total = len(assignments)
    mean_score = sum(a.score for a in assignments) / total if total else 0.0

    return {
        "total_assignments": total,
        "mean_score": mean_score,
        "reviewer_loads": dict(reviewer_loads),
        "load_distribution": dict(sorted(Counter(reviewer_loads.values()).items())),
        "paper_coverage": dict(paper_coverage),
        "preference_distribution": dict(preference_distribution),
    }


def assignment_rows(assignments, round_id):
    """The compact assignment table; discussion leads get a "lead" action."""
    round_id = Round(round_id)
    if round_id is Round.DL:
        return [
            {"paper": a.paper, "action": round_id.action, "email": a.email}
            for a in assignments
        ]

    return [
        {
            "paper": a.paper,
            "assignment": round_id.action,
            "email": a.email,
            "round": round_id.value,
        }
        for a in assignments
    ]


def detail_rows(assignments, score_cells, reviewers, papers):
    """The detailed table: one row per assignment with every sub-score."""
    cell_by_pair = {(cell.email, cell.paper): cell for cell in score_cells}
    reviewer_by_email = {reviewer.email: reviewer for reviewer in reviewers}
    paper_by_id = {paper.id: paper for paper in papers}

    rows = []
    for a in assignments:
        cell = cell_by_pair.get((a.email, a.paper))
        reviewer = reviewer_by_email.get(a.email)
        paper = paper_by_id.get(a.paper)
        rows.append(
            {
                "paper": a.paper,
                "email": a.email,
                "score": round(a.score, 3),
                "preference": cell.preference if cell else 0,
                "norm_topic_score": round(cell.affinity, 3) if cell else 0,
                "tpms_score": round(cell.external_score, 3) if cell else 0,
                "pc_name": reviewer_name(reviewer) if reviewer else "",
                "paper_title": paper.title if paper else "",
            }
        )

    return rows
