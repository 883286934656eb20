"""
tests.test_groups

Group name to group key derivation.
"""

from __future__ import annotations

import pytest

from sessionguard.auth.groups import group_key, group_map


@pytest.mark.parametrize(
    ("display", "key"),
    [
        ("Sales", "sales"),
        ("SALES", "sales"),
        ("  sales ", "sales"),
        ("Customer Support", "customer-support"),
        ("Ops & Infra", "ops-infra"),
        ("Café", "cafe"),
    ],
)
def test_group_key(display: str, key: str) -> None:
    assert group_key(display) == key


def test_group_map_last_spelling_wins() -> None:
    assert group_map(["Sales", "Support", "SALES"]) == {"sales": "SALES", "support": "Support"}


def test_group_map_drops_names_without_a_key() -> None:
    assert group_map(["!!!", "Root"]) == {"root": "Root"}
