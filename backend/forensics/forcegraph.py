"""Bridge between the canonical Graph and force-graph renderer JSON.

Output: JSON structure suitable for react-force-graph / force-graph:
    {
        "nodes": [{...attributes, id, name, val, color, colorClass}],
        "links": [{id, source, target, value, label}],
        "stats": {total_nodes, total_links, color_classes}
    }

Once layout starts the renderer replaces link `source`/`target` ids with
the node objects themselves, so anything reading links back from the
browser goes through `endpoint_id`.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from .graph_model import COLOR_CLASSES, NORMAL, Graph, Link, Node, make_label
from .highlight import HighlightState

log = logging.getLogger("chainscope.forensics.forcegraph")

# Colour class -> fill colour
NODE_COLORS = {
    "origin": "#51cf66",
    "high-activity": "#ff6b6b",
    "normal": "#4ecdc4",
}

LEGEND = [
    {"color_class": "origin", "label": "Origin", "color": NODE_COLORS["origin"]},
    {"color_class": "high-activity", "label": "High activity", "color": NODE_COLORS["high-activity"]},
    {"color_class": "normal", "label": "Normal", "color": NODE_COLORS["normal"]},
]

# Keys owned by the renderer payload; raw attributes never override them
_NODE_KEYS = ("id", "name", "val", "color", "colorClass")

# Keys the layout engine adds to node objects
_LAYOUT_KEYS = ("x", "y", "vx", "vy", "fx", "fy", "index", "__indexColor")


def _node_entry(node: Node) -> Dict[str, Any]:
    entry: Dict[str, Any] = dict(node.attributes)
    entry.update({
        "id": node.id,
        "name": node.label,
        "val": node.weight,
        "color": NODE_COLORS.get(node.color_class, NODE_COLORS[NORMAL]),
        "colorClass": node.color_class,
    })
    return entry


def _link_entry(link: Link) -> Dict[str, Any]:
    return {
        "id": link.link_id,
        "source": link.source_id,
        "target": link.target_id,
        "value": link.value,
        "label": link.label,
    }


def to_force_graph(graph: Graph) -> Dict[str, Any]:
    """Render a Graph as force-graph JSON."""
    return {
        "nodes": [_node_entry(n) for n in graph.nodes],
        "links": [_link_entry(link) for link in graph.links],
        "stats": graph.stats(),
    }


def endpoint_id(value: Any) -> Optional[str]:
    """Id of a link endpoint: plain id first, else the resolved node's id."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Mapping):
        return endpoint_id(value.get("id"))
    return endpoint_id(getattr(value, "id", None))


def _to_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(num) or math.isinf(num):
        return default
    return num


def graph_from_force_graph(payload: Any) -> Graph:
    """Rebuild a canonical Graph from renderer JSON.

    Tolerates renderer-mutated endpoints and layout keys (x, y, vx, ...).
    Links whose endpoints cannot be resolved are dropped; endpoints missing
    from `nodes` get placeholder nodes.
    """
    if not isinstance(payload, Mapping):
        return Graph.empty()

    nodes: Dict[str, Node] = {}
    for entry in payload.get("nodes") or []:
        if not isinstance(entry, Mapping):
            continue
        node_id = endpoint_id(entry)
        if not node_id or node_id in nodes:
            continue
        color_class = entry.get("colorClass")
        if color_class not in COLOR_CLASSES:
            color_class = NORMAL
        nodes[node_id] = Node(
            id=node_id,
            label=str(entry.get("name") or make_label(node_id)),
            weight=_to_float(entry.get("val"), 1.0),
            color_class=color_class,
            attributes={k: v for k, v in entry.items() if k not in _NODE_KEYS and k not in _LAYOUT_KEYS},
        )

    links: List[Link] = []
    for entry in payload.get("links") or []:
        if not isinstance(entry, Mapping):
            continue
        source_id = endpoint_id(entry.get("source"))
        target_id = endpoint_id(entry.get("target"))
        if not source_id or not target_id:
            log.debug("Dropping link with unresolved endpoint: %r", entry.get("id"))
            continue
        label = entry.get("label")
        links.append(Link(
            source_id=source_id,
            target_id=target_id,
            value=_to_float(entry.get("value"), 1.0),
            label=label if isinstance(label, str) else None,
            link_id=str(entry.get("id") or f"{source_id}->{target_id}"),
        ))

    return Graph(nodes.values(), links)


def highlight_payload(state: HighlightState) -> Dict[str, Any]:
    """Highlight sets as sorted id lists for the renderer."""
    return {
        "hovered": state.hovered.id if state.hovered else None,
        "nodes": sorted(n.id for n in state.nodes),
        "links": sorted(link.link_id for link in state.links),
    }
