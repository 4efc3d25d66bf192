"""Group name resolution (core domain)."""

from __future__ import annotations

import logging
from typing import Iterable

from core.errors import AmbiguousGroup, GroupNotFound
from core.models import Group

LOGGER = logging.getLogger(__name__)


def match_groups(name: str, groups: Iterable[Group]) -> list[Group]:
    """Return every group whose name contains ``name`` or is contained in it.

    Matching is case-insensitive and keeps the provider's list order.
    """

    needle = name.strip().lower()
    if not needle:
        return []
    matches: list[Group] = []
    for group in groups:
        haystack = group.display_name.strip().lower()
        if not haystack:
            continue
        if needle in haystack or haystack in needle:
            matches.append(group)
    return matches


def resolve_group(name: str, groups: Iterable[Group], strict: bool = False) -> Group:
    """Resolve a user-supplied name to exactly one group.

    - No match raises GroupNotFound with every available display name.
    - Several matches return the first one in list order, or raise
      AmbiguousGroup when ``strict`` is set.
    """

    available = list(groups)
    matches = match_groups(name, available)
    if not matches:
        raise GroupNotFound(name, [group.display_name for group in available])
    if len(matches) > 1:
        names = [group.display_name for group in matches]
        if strict:
            raise AmbiguousGroup(name, names)
        LOGGER.info("Group name %r matched %s groups, using %r", name, len(matches), names[0])
    return matches[0]
