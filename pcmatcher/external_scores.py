"""
Resolves third-party affinity scores (e.g. TPMS) onto PC member emails.

Raw rows are positional, with no header:

    (<paper ID>, <external identity>, <raw score>)

The external identity is looked up in an alias map built from records with the
fields "tpms_email" and "alias_email". Identities without an alias are used
unchanged.
"""

from collections.abc import Mapping
import logging

from .preferences import to_number


def build_alias_map(alias_records):
    """Return a dict mapping external identities to canonical reviewer emails."""
    alias_map = {}
    for record in alias_records or []:
        alias = record.get("alias_email")
        if alias:
            alias_map[record.get("tpms_email")] = alias
    return alias_map


def resolve_identity(identity, alias_map):
    return alias_map.get(identity) or identity


def resolve_external_scores(rows, alias_map, logger=logging.getLogger(__name__)):
    """
    Return a dict of raw external scores keyed on (email, paper).

    Later rows overwrite earlier rows with the same key.
    """
    scores = {}
    skipped = 0
    for row in rows or []:
        values = list(row.values()) if isinstance(row, Mapping) else list(row)
        if len(values) < 3:
            skipped += 1
            continue

        paper, identity, score = values[:3]
        email = resolve_identity(identity, alias_map)
        scores[(email, paper)] = to_number(score)

    if skipped:
        logger.debug("Skipped {} short external score rows".format(skipped))
    logger.debug("Resolved {} external scores".format(len(scores)))

    return scores
