"""
Persistent Attribute Records

Bookkeeping for every piece of world data that has to change when a system
takes on another system's identity: which entity it belongs to, what kind
of attribute it is, the baseline action tag, and the original node.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple

from esgen.parser import DataNode

# Attribute kinds
POS = "pos"
LINK = "link"
UNLINK = "unlink"
JUMP_RANGE = "jump range"
INACCESSIBLE = "inaccessible"
HIDDEN = "hidden"
SHROUDED = "shrouded"
OBJECT = "object"

LINK_KINDS = (LINK, UNLINK)

# Entity kinds
SYSTEM = "system"
WORMHOLE = "wormhole"

# Attributes tracked per entity kind. Objects are handled separately, and only
# when they carry a wormhole; see extract.py.
TRACKED_ATTRIBUTES = {
    SYSTEM: (POS, LINK, JUMP_RANGE, INACCESSIBLE, HIDDEN, SHROUDED),
    WORMHOLE: (LINK,),
}

MODIFIERS = ("add", "remove")


class NodeAction(Enum):
    """Baseline action tag: how the source data declared an attribute."""
    REMOVE = "remove"              # remove <kind> <payload...>
    CLEAR_REMOVE = "clear_remove"  # remove <kind>
    ADD = "add"                    # add <kind> ...
    CLEAR_ADD = "clear_add"        # <kind> ... (replaces whatever was there)

    @property
    def adds(self) -> bool:
        return self in (NodeAction.ADD, NodeAction.CLEAR_ADD)

    @property
    def removes(self) -> bool:
        return not self.adds

    @classmethod
    def of(cls, declaration: DataNode) -> 'NodeAction':
        """Derive the tag from a declaration's modifier and payload."""
        if declaration.key == "remove":
            # tokens: remove <kind> [payload...]
            if declaration.size > 2 or declaration.has_children:
                return cls.REMOVE
            return cls.CLEAR_REMOVE
        if declaration.key == "add":
            return cls.ADD
        return cls.CLEAR_ADD


def attribute_kind(tokens: List[str]) -> str:
    """The attribute a line declares, looking past an add/remove modifier."""
    if not tokens:
        return ""
    index = 1 if tokens[0] in MODIFIERS else 0
    return tokens[index] if index < len(tokens) else ""


class EntityKey(NamedTuple):
    """(kind, name) of a system or wormhole; name is empty for the link/unlink aggregates."""
    kind: str
    name: str


LINK_AGGREGATE = EntityKey(LINK, "")
UNLINK_AGGREGATE = EntityKey(UNLINK, "")


@dataclass(frozen=True)
class OriginalNode:
    """One recorded attribute: its baseline tag and the node it came from."""
    action: NodeAction
    node: DataNode

    def same_as(self, other: 'OriginalNode') -> bool:
        return self.action == other.action and self.node is other.node


AttributeMap = Dict[str, List[OriginalNode]]


class AttributeRecords:
    """
    (entity key, attribute kind) -> ordered list of original nodes.

    Appending the same (action, node) pair twice is a no-op, so a
    declaration reached from two walks is only recorded once. Iteration is
    always in sorted key order.
    """

    def __init__(self):
        self._records: Dict[EntityKey, AttributeMap] = {}

    def persist(self, key: EntityKey, kind: str, original: OriginalNode) -> None:
        values = self._records.setdefault(key, {}).setdefault(kind, [])
        if not any(existing.same_as(original) for existing in values):
            values.append(original)

    def keys(self) -> List[EntityKey]:
        return sorted(self._records)

    def get(self, key: EntityKey) -> AttributeMap:
        return self._records.get(key, {})

    def __getitem__(self, key: EntityKey) -> AttributeMap:
        return self._records[key]

    def __contains__(self, key: EntityKey) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[EntityKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self):
        return f"AttributeRecords({len(self._records)} entities)"
