"""Tests for the entity id contract and setter id derivation."""

import pytest

from core.id_contract import (
    IdAllocator,
    create_entity_id,
    is_setter_id,
    make_setter_id,
    parse_entity_id,
    state_id_from_setter,
)


def test_create_entity_id_format() -> None:
    assert create_entity_id("component", 0) == "component-0"
    assert create_entity_id("effect", 12) == "effect-12"


def test_create_entity_id_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        create_entity_id("setter", 1)


def test_setter_id_keeps_state_suffix() -> None:
    assert make_setter_id("state-3") == "setter-state-3"
    assert state_id_from_setter("setter-state-3") == "state-3"
    assert is_setter_id("setter-state-3")
    assert not is_setter_id("state-3")


def test_setter_id_only_from_state_ids() -> None:
    with pytest.raises(ValueError):
        make_setter_id("prop-1")
    with pytest.raises(ValueError):
        make_setter_id("setter-state-1")


def test_parse_entity_id() -> None:
    parsed = parse_entity_id("setter-state-7")
    assert parsed == {"kind": "state", "ordinal": 7, "is_setter": True}
    assert parse_entity_id("prop-2")["is_setter"] is False


@pytest.mark.parametrize("bad", ["", "component", "component-x", "setter-prop-1", "state_1"])
def test_parse_entity_id_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_entity_id(bad)


def test_allocator_counts_per_kind() -> None:
    allocator = IdAllocator()
    assert allocator.next_id("component") == "component-0"
    assert allocator.next_id("prop") == "prop-0"
    assert allocator.next_id("component") == "component-1"
    assert allocator.next_id("prop") == "prop-1"
    assert allocator.allocated("component") == 2
    assert allocator.allocated("state") == 0


def test_allocator_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        IdAllocator().next_id("widget")
