"""
sessionguard.auth.groups

Admin group key derivation.

A group is stored under `slug(lower(display_name))`, so "Sales", "SALES" and
" sales " collide into one key. Provisioning and preware both go through
`group_key` so the two sides can never disagree.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def group_key(display_name: str) -> str:
    folded = unicodedata.normalize("NFKD", display_name).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", folded.lower()).strip("-")


def group_map(display_names: Iterable[str]) -> dict[str, str]:
    # Later spellings of the same key win, matching a plain dict update.
    groups: dict[str, str] = {}
    for name in display_names:
        key = group_key(name)
        if key:
            groups[key] = name
    return groups
