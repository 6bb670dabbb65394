"""
Delta Synthesis

Turns recorded attributes into the pair of event bodies that move a preset
in and out of the universe:

- the activation delta rebuilds every entity under its shuffled name,
- the restoration delta undoes exactly what the activation added.

Each recorded node yields one node per direction. Whether it adds or removes
depends on the direction and on how the baseline declared it: a baseline
``add link`` is added on activation and removed on restoration, a baseline
``remove link`` the other way around.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from esgen.generators.common import copy_node
from esgen.generators.system_shuffler.records import (
    JUMP_RANGE,
    LINK,
    LINK_KINDS,
    MODIFIERS,
    OBJECT,
    POS,
    UNLINK,
    WORMHOLE,
    AttributeMap,
    AttributeRecords,
    EntityKey,
    OriginalNode,
)
from esgen.parser import DataNode, node

# Nodes headed by these tokens must come before anything else in an entity
LEADING_KEYS = (POS, "remove")


@dataclass
class EntityDelta:
    """Restoration and activation nodes for one entity, already ordered."""
    key: EntityKey
    target: str
    restoration: List[DataNode] = field(default_factory=list)
    activation: List[DataNode] = field(default_factory=list)


def _leading_first(nodes: List[DataNode]) -> List[DataNode]:
    return sorted(nodes, key=lambda n: 0 if n.key in LEADING_KEYS else 1)


def _split_links(nodes: List[DataNode]) -> Tuple[List[DataNode], List[DataNode]]:
    """(nodes that belong under the entity, bare link/unlink nodes)."""
    nested = [n for n in nodes if n.key not in LINK_KINDS]
    bare = [n for n in nodes if n.key in LINK_KINDS]
    return nested, bare


class DeltaSynthesizer:
    """
    Builds deltas for one preset.

    Args:
        swaps: system name -> the name it takes in this preset. Names that
            are missing map to themselves.
    """

    def __init__(self, swaps: Dict[str, str]):
        self.swaps = swaps

    def rename(self, name: str) -> str:
        return self.swaps.get(name, name)

    def synthesize(self, key: EntityKey, attributes: AttributeMap) -> EntityDelta:
        return EntityDelta(
            key=key,
            target=self.rename(key.name),
            restoration=self.modified_nodes(key, attributes, activating=False),
            activation=self.modified_nodes(key, attributes, activating=True),
        )

    def modified_nodes(self, key: EntityKey, attributes: AttributeMap, activating: bool) -> List[DataNode]:
        modified: List[DataNode] = []

        # Non-link kinds first, then link/unlink
        for kind in sorted(attributes, key=lambda k: (k in LINK_KINDS, k)):
            removed_wormhole_links = False

            for original in attributes[kind]:
                adding = ((activating and original.action.adds)
                          or (not activating and original.action.removes))

                if kind == POS:
                    result = self.modify_pos(original)
                elif kind == JUMP_RANGE:
                    result = self.modify_jump_range(original, adding)
                elif kind in LINK_KINDS:
                    if key.kind == WORMHOLE and not adding:
                        # Restoring a wormhole emits one bare `remove link`, which
                        # clears every link. Later removals are skipped; adding
                        # link records are still emitted.
                        if removed_wormhole_links:
                            continue
                        removed_wormhole_links = True
                    result = self.modify_link(kind, key.kind, original, adding)
                elif kind == OBJECT:
                    result = self.modify_object(original, adding)
                else:
                    result = self.modify_other(kind, original, adding)

                if result is not None:
                    modified.append(result)

        return _leading_first(modified)

    def modify_pos(self, original: OriginalNode) -> Optional[DataNode]:
        return copy_node(original.node)

    def modify_jump_range(self, original: OriginalNode, adding: bool) -> Optional[DataNode]:
        if adding:
            return copy_node(original.node)
        return node(JUMP_RANGE, 0)

    def modify_link(self, kind: str, owner_kind: str, original: OriginalNode, adding: bool) -> DataNode:
        """
        Build a link edit with every system name renamed.

        Top-level link/unlink lines become bare ``link``/``unlink``; links
        owned by an entity become ``add link``/``remove link``. Removing a
        wormhole's links is always the bare form.
        """
        if owner_kind in LINK_KINDS:
            modified = node(LINK if adding else UNLINK)
        else:
            modified = node("add" if adding else "remove", LINK)

        if owner_kind != WORMHOLE or adding:
            tokens = original.node.tokens
            if kind in tokens:
                start = tokens.index(kind) + 1
                modified.tokens.extend(self.rename(name) for name in tokens[start:])

        return modified

    def modify_object(self, original: OriginalNode, adding: bool) -> Optional[DataNode]:
        # Removing an object removes whatever is nested inside it
        disallowed = (LINK,) if adding else (LINK, OBJECT)
        modified = copy_node(original.node, disallowed)
        if modified is None:
            return None

        modifier = "add" if adding else "remove"
        if modified.key in MODIFIERS:
            modified.tokens[0] = modifier
        else:
            modified.tokens.insert(0, modifier)
        return modified

    def modify_other(self, kind: str, original: OriginalNode, adding: bool) -> Optional[DataNode]:
        if not adding:
            return node("remove", kind)

        modified = copy_node(original.node)
        if modified is not None and modified.key in MODIFIERS:
            del modified.tokens[0]
        return modified

    def write_events(self, records: AttributeRecords, restore_event: DataNode, activate_event: DataNode) -> None:
        """
        Append every entity's deltas to a restore/activate event pair.

        Entity edits go under a ``<kind> <shuffled name>`` parent; bare
        link/unlink lines are attached to the event itself, after the parent.
        """
        for key in records:
            delta = self.synthesize(key, records[key])

            nested_restore, bare_restore = _split_links(delta.restoration)
            nested_activate, bare_activate = _split_links(delta.activation)

            if nested_restore or nested_activate:
                restore_event.children.append(node(key.kind, delta.target, children=nested_restore))
                activate_event.children.append(node(key.kind, delta.target, children=nested_activate))

            restore_event.children.extend(bare_restore)
            activate_event.children.extend(bare_activate)


def preset_events(records: AttributeRecords, swaps: Dict[str, str],
                  restore_name: str, activate_name: str) -> Tuple[DataNode, DataNode]:
    """Build the named restore and activate events for one set of records."""
    restore_event = node("event", restore_name)
    activate_event = node("event", activate_name)
    DeltaSynthesizer(swaps).write_events(records, restore_event, activate_event)
    return restore_event, activate_event
