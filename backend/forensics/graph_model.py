"""Canonical node/link graph shared by the projector and highlight engine.

- Node: one wallet, transaction or placeholder, unique by id
- Link: directed connection between two node ids
- Graph: node index + ordered links, compared structurally
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

# Node colour classes
ORIGIN = "origin"
HIGH_ACTIVITY = "high-activity"
NORMAL = "normal"

COLOR_CLASSES = (ORIGIN, HIGH_ACTIVITY, NORMAL)

DEFAULT_LABEL_LENGTH = 8


def make_label(node_id: str, length: int = DEFAULT_LABEL_LENGTH) -> str:
    """Short display label: first `length` chars + '...' for long ids."""
    if len(node_id) <= length:
        return node_id
    return node_id[:length] + "..."


@dataclass(frozen=True)
class Node:
    """Single graph vertex."""

    id: str
    label: str = ""
    weight: float = 1.0
    color_class: str = NORMAL
    # Raw source record; compared but never hashed (dicts are unhashable)
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "weight": self.weight,
            "color_class": self.color_class,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class Link:
    """Directed link between two node ids."""

    source_id: str
    target_id: str
    value: float = 1.0
    label: Optional[str] = None
    link_id: str = ""

    def touches(self, node_id: str) -> bool:
        return self.source_id == node_id or self.target_id == node_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.link_id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "value": self.value,
            "label": self.label,
        }


class Graph:
    """Immutable node set + link sequence.

    Link endpoints missing from `nodes` get default placeholder nodes.
    Equality is structural: the same nodes (by value) and the same links
    as a multiset. Link order is kept only for stable rendering.
    """

    __slots__ = ("_nodes", "_links")

    def __init__(self, nodes: Iterable[Node] = (), links: Iterable[Link] = ()) -> None:
        index: Dict[str, Node] = {}
        for node in nodes:
            # first occurrence wins
            index.setdefault(node.id, node)
        self._links: Tuple[Link, ...] = tuple(links)
        # every link endpoint resolves to a node
        for link in self._links:
            for endpoint in (link.source_id, link.target_id):
                if endpoint not in index:
                    index[endpoint] = Node(id=endpoint, label=make_label(endpoint))
        self._nodes = index

    @classmethod
    def empty(cls) -> "Graph":
        return cls()

    # ------------- access -------------
    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def links(self) -> Tuple[Link, ...]:
        return self._links

    @property
    def node_ids(self) -> List[str]:
        return list(self._nodes.keys())

    def node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def links_touching(self, node_id: str) -> Iterator[Link]:
        """Links having `node_id` as source or target (single pass)."""
        for link in self._links:
            if link.touches(node_id):
                yield link

    @property
    def is_empty(self) -> bool:
        return not self._nodes and not self._links

    def stats(self) -> Dict[str, Any]:
        """Summary counts, same layout as the flow graph stats block."""
        classes: Dict[str, int] = Counter(n.color_class for n in self._nodes.values())
        return {
            "total_nodes": len(self._nodes),
            "total_links": len(self._links),
            "color_classes": dict(classes),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "links": [link.to_dict() for link in self._links],
            "stats": self.stats(),
        }

    # ------------- structural equality -------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self._nodes == other._nodes and Counter(self._links) == Counter(other._links)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, links={len(self._links)})"
