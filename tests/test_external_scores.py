from pcmatcher.external_scores import (
    build_alias_map,
    resolve_identity,
    resolve_external_scores,
)


def test_alias_map_ignores_empty_aliases():
    alias_map = build_alias_map(
        [
            {"tpms_email": "a-tpms", "alias_email": "a@example.org"},
            {"tpms_email": "b-tpms", "alias_email": ""},
        ]
    )
    assert alias_map == {"a-tpms": "a@example.org"}


def test_unaliased_identity_resolves_to_itself():
    assert resolve_identity("b@example.org", {"a-tpms": "a@example.org"}) == "b@example.org"


def test_resolve_external_scores():
    rows = [
        (1, "a-tpms", 0.5),
        (2, "b@example.org", "0.25"),
        [3, "b@example.org", "junk"],
    ]
    scores = resolve_external_scores(rows, {"a-tpms": "a@example.org"})
    assert scores == {
        ("a@example.org", 1): 0.5,
        ("b@example.org", 2): 0.25,
        ("b@example.org", 3): 0.0,
    }


def test_last_row_wins():
    rows = [(1, "a@example.org", 0.1), (1, "a@example.org", 0.7)]
    assert resolve_external_scores(rows, {}) == {("a@example.org", 1): 0.7}


def test_mapping_rows_and_short_rows():
    rows = [{"0": 1, "1": "a@example.org", "2": 0.4}, (1, "a@example.org")]
    assert resolve_external_scores(rows, {}) == {("a@example.org", 1): 0.4}


def test_no_rows():
    assert resolve_external_scores(None, {}) == {}
