"""Entity id contract shared by extraction and graph layers.

Ids have the form ``<kind>-<n>``. The setter paired with ``state-<n>`` is
addressed as ``setter-state-<n>``. Consumers route edges by prefix, so the
format must not drift.
"""

from __future__ import annotations

import re
import threading
from typing import TypedDict

ID_SEPARATOR = "-"

KIND_COMPONENT = "component"
KIND_PROP = "prop"
KIND_STATE = "state"
KIND_EFFECT = "effect"
SETTER_PREFIX = "setter"

ENTITY_KINDS: tuple[str, ...] = (KIND_COMPONENT, KIND_PROP, KIND_STATE, KIND_EFFECT)

_ID_RE = re.compile(r"^(?:(setter)-)?(component|prop|state|effect)-(\d+)$")


class ParsedEntityId(TypedDict):
    """Parsed entity id payload."""

    kind: str
    ordinal: int
    is_setter: bool


def create_entity_id(kind: str, ordinal: int) -> str:
    """Create an entity id from its kind and ordinal.

    Raises:
        ValueError: If ``kind`` is unknown or ``ordinal`` is negative.
    """
    if kind not in ENTITY_KINDS:
        raise ValueError(f"Unknown entity kind: {kind}")
    if ordinal < 0:
        raise ValueError(f"Ordinal must be non-negative, got {ordinal}")
    return f"{kind}{ID_SEPARATOR}{ordinal}"


def make_setter_id(state_id: str) -> str:
    """Return the setter reference paired with ``state_id``."""
    parsed = parse_entity_id(state_id)
    if parsed["kind"] != KIND_STATE or parsed["is_setter"]:
        raise ValueError(f"Setter ids can only be derived from state ids: {state_id}")
    return f"{SETTER_PREFIX}{ID_SEPARATOR}{state_id}"


def state_id_from_setter(setter_id: str) -> str:
    """Return the state id a setter reference points at."""
    parsed = parse_entity_id(setter_id)
    if not parsed["is_setter"]:
        raise ValueError(f"Not a setter id: {setter_id}")
    return create_entity_id(KIND_STATE, parsed["ordinal"])


def is_setter_id(entity_id: str) -> bool:
    return entity_id.startswith(f"{SETTER_PREFIX}{ID_SEPARATOR}")


def parse_entity_id(entity_id: str) -> ParsedEntityId:
    """Parse an entity id into its components.

    Raises:
        ValueError: If the id does not follow the contract.
    """
    match = _ID_RE.match(entity_id)
    if match is None:
        raise ValueError(f"Malformed entity id: {entity_id}")
    setter, kind, ordinal = match.groups()
    if setter and kind != KIND_STATE:
        raise ValueError(f"Setter prefix is only valid on state ids: {entity_id}")
    return ParsedEntityId(kind=kind, ordinal=int(ordinal), is_setter=bool(setter))


class IdAllocator:
    """Hands out sequential ``<kind>-<n>`` ids, one counter per kind.

    Ids are allocated in the order callers ask for them, so allocating in
    file order then declaration order gives stable ids across runs.
    """

    def __init__(self, start: int = 0):
        self._start = start
        self._counters: dict[str, int] = {kind: start for kind in ENTITY_KINDS}
        self._lock = threading.Lock()

    def next_id(self, kind: str) -> str:
        with self._lock:
            if kind not in self._counters:
                raise ValueError(f"Unknown entity kind: {kind}")
            ordinal = self._counters[kind]
            self._counters[kind] = ordinal + 1
        return create_entity_id(kind, ordinal)

    def allocated(self, kind: str) -> int:
        """Number of ids handed out for ``kind``."""
        return self._counters[kind] - self._start
