"""Hover-driven highlight state over a canonical Graph.

Two logical states: idle (nothing hovered) and hovering a node. Every hover
event recomputes the highlight sets from scratch: the hovered node, its
direct neighbours and the links joining them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Set, Union

from .graph_model import Graph, Link, Node

log = logging.getLogger("chainscope.forensics.highlight")

Hovered = Union[Node, str, None]


@dataclass(frozen=True)
class HighlightState:
    hovered: Optional[Node] = None
    nodes: FrozenSet[Node] = frozenset()
    links: FrozenSet[Link] = frozenset()

    @property
    def is_idle(self) -> bool:
        return self.hovered is None


IDLE = HighlightState()


def _hovered_id(hovered: Hovered) -> Optional[str]:
    if hovered is None:
        return None
    if isinstance(hovered, Node):
        return hovered.id
    if isinstance(hovered, str):
        return hovered or None
    return None


def compute_highlight(graph: Optional[Graph], hovered: Hovered) -> HighlightState:
    """Nodes and links to emphasise while `hovered` is under the pointer.

    A node absent from `graph` is treated as no hover at all.
    """
    node_id = _hovered_id(hovered)
    if graph is None or node_id is None:
        return IDLE

    node = graph.node(node_id)
    if node is None:
        return IDLE

    nodes: Set[Node] = {node}
    links: Set[Link] = set()
    for link in graph.links_touching(node_id):
        links.add(link)
        for endpoint in (link.source_id, link.target_id):
            neighbour = graph.node(endpoint)
            if neighbour is not None:
                nodes.add(neighbour)

    return HighlightState(hovered=node, nodes=frozenset(nodes), links=frozenset(links))


class HighlightEngine:
    """Owned highlight state for one graph view."""

    def __init__(self, graph: Optional[Graph] = None) -> None:
        self._graph = graph if graph is not None else Graph.empty()
        self._state = IDLE

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def state(self) -> HighlightState:
        return self._state

    def load(self, graph: Graph) -> HighlightState:
        """Swap in a freshly projected graph; highlight returns to idle."""
        self._graph = graph
        self._state = IDLE
        return self._state

    def on_hover(self, hovered: Hovered) -> HighlightState:
        """Pointer entered a node, moved to another one, or left (None)."""
        self._state = compute_highlight(self._graph, hovered)
        log.debug(
            "Hover %s: %d nodes, %d links highlighted",
            self._state.hovered.id if self._state.hovered else None,
            len(self._state.nodes),
            len(self._state.links),
        )
        return self._state

    def is_node_highlighted(self, node: Union[Node, str]) -> bool:
        node_id = _hovered_id(node)
        return any(n.id == node_id for n in self._state.nodes)

    def is_link_highlighted(self, link: Link) -> bool:
        return link in self._state.links
