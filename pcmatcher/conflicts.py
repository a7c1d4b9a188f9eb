"""
Conflicts of interest between pairs of PC members.

Two conflicted reviewers are never assigned to the same paper. Pairs are
unordered: (a, b) and (b, a) are the same conflict.
"""

import logging


def _pair(email, other_email):
    return tuple(sorted((email, other_email)))


class ConflictSet:
    """A symmetric, deduplicated set of conflicted reviewer pairs."""

    def __init__(self, pairs=None):
        self._pairs = set()
        for email, other_email in pairs or []:
            self.add(email, other_email)

    @classmethod
    def from_records(
        cls, records, reviewer_emails, logger=logging.getLogger(__name__)
    ):
        """
        Build the set from records with the fields "email" and "conflict_email",
        keeping only pairs where both sides are current PC members.
        """
        reviewer_emails = set(reviewer_emails)
        conflicts = cls()
        ignored = 0
        for record in records or []:
            email = record.get("email")
            other_email = record.get("conflict_email")
            if email in reviewer_emails and other_email in reviewer_emails:
                conflicts.add(email, other_email)
            else:
                ignored += 1

        logger.debug(
            "Conflict pairs={}, ignored records={}".format(len(conflicts), ignored)
        )
        return conflicts

    def add(self, email, other_email):
        self._pairs.add(_pair(email, other_email))

    def are_conflicted(self, email, other_email):
        return _pair(email, other_email) in self._pairs

    def __contains__(self, pair):
        email, other_email = pair
        return self.are_conflicted(email, other_email)

    def __len__(self):
        return len(self._pairs)

    def __iter__(self):
        return iter(sorted(self._pairs))

    def __repr__(self):
        return "ConflictSet({})".format(sorted(self._pairs))
