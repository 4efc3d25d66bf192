from __future__ import annotations

import pytest

from core.errors import AmbiguousGroup, GroupNotFound
from core.models import Group
from core.resolver import match_groups, resolve_group

GROUPS = [
    Group(id=1, display_name="Family Group 2024", member_count=5),
    Group(id=2, display_name="Site Crew - Tower A", member_count=12),
    Group(id=3, display_name="Site Crew - Tower B", member_count=9),
]


def test_case_insensitive_substring_resolves_single_group() -> None:
    group = resolve_group("family", GROUPS)
    assert group.id == 1


def test_name_containing_display_name_matches() -> None:
    groups = [Group(id=7, display_name="Crew")]
    assert resolve_group("Crew chat", groups).id == 7


def test_no_match_lists_all_available_names() -> None:
    with pytest.raises(GroupNotFound) as excinfo:
        resolve_group("plumbers", GROUPS)
    assert excinfo.value.available == [group.display_name for group in GROUPS]
    assert "Site Crew - Tower A" in excinfo.value.hint


def test_multiple_matches_pick_first_in_list_order() -> None:
    assert resolve_group("site crew", GROUPS).id == 2


def test_strict_policy_rejects_ambiguous_names() -> None:
    with pytest.raises(AmbiguousGroup) as excinfo:
        resolve_group("site crew", GROUPS, strict=True)
    assert excinfo.value.matches == ["Site Crew - Tower A", "Site Crew - Tower B"]


def test_blank_name_matches_nothing() -> None:
    assert match_groups("   ", GROUPS) == []
    with pytest.raises(GroupNotFound):
        resolve_group("", GROUPS)
