"""Graph projector for forensic query results.

Turns any analysis result (typed variant or raw backend JSON) into one
canonical Graph:
- ConnectedWallets: one node per wallet, no links
- Chains: source -> recipient link per chain
- WalletPath: nodes along the path, links between neighbours
- GenericList: one node per record, no links
- Unrecognized: empty graph

Projection never raises and never mutates its input. Missing or malformed
fields fall back to defaults.
"""

from __future__ import annotations

import copy
import logging
import math
import sys
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .graph_model import (
    DEFAULT_LABEL_LENGTH,
    HIGH_ACTIVITY,
    NORMAL,
    ORIGIN,
    Graph,
    Link,
    Node,
    make_label,
)
from .results import (
    AnalysisResult,
    Chains,
    ConnectedWallets,
    GenericList,
    WalletPath,
    classify_result,
)

log = logging.getLogger("chainscope.forensics.projector")

# Visual sizing
WEIGHT_MULTIPLIER = 2
HIGH_DEGREE_THRESHOLD = 5
CHAIN_SOURCE_WEIGHT = 3
CHAIN_TARGET_WEIGHT = 2
PATH_END_WEIGHT = 5
PATH_INNER_WEIGHT = 3
PLACEHOLDER_WEIGHT = 1

AMOUNT_UNIT = "BTC"


# ============================================================
# FIELD HELPERS
# ============================================================

def _as_number(value: Any) -> Optional[float]:
    """Coerce a JSON value to a finite number, None when not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        num = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        # integers beyond float range count as non-numeric
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def _first_number(record: Any, keys: Tuple[str, ...], default: float) -> float:
    """First non-zero numeric field among `keys`, else `default`."""
    if isinstance(record, Mapping):
        for key in keys:
            num = _as_number(record.get(key))
            if num:
                return num
    return default


def _as_id(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _record_id(record: Any, keys: Tuple[str, ...]) -> Optional[str]:
    """Id of a record: first non-empty key, or the record itself if scalar."""
    if isinstance(record, Mapping):
        for key in keys:
            node_id = _as_id(record.get(key))
            if node_id:
                return node_id
        return None
    return _as_id(record)


def _attributes(record: Any) -> Dict[str, Any]:
    if isinstance(record, Mapping):
        return copy.deepcopy(dict(record))
    return {}


def format_amount(amount: Any) -> str:
    """Amount with thousands separators and at most 3 decimals, plus unit."""
    num = _as_number(amount) or 0.0
    if num == int(num):
        text = f"{int(num):,}"
    else:
        text = f"{num:,.3f}".rstrip("0").rstrip(".")
    return f"{text} {AMOUNT_UNIT}"


# ============================================================
# GRAPH BUILDER
# ============================================================

class _GraphBuilder:
    """Collects nodes (first-seen wins) and links for one projection pass."""

    def __init__(self, label_length: int) -> None:
        self._label_length = label_length
        self._nodes: Dict[str, Node] = {}
        self._links: List[Link] = []
        self._pair_counts: Dict[Tuple[str, str], int] = {}

    def add_node(
        self,
        node_id: str,
        weight: float,
        color_class: str,
        record: Any = None,
    ) -> None:
        if node_id in self._nodes:
            return
        # near-max degrees times the multiplier overflow to inf
        weight = min(float(weight), sys.float_info.max)
        self._nodes[node_id] = Node(
            id=node_id,
            label=make_label(node_id, self._label_length),
            weight=weight,
            color_class=color_class,
            attributes=_attributes(record),
        )

    def add_link(self, source_id: str, target_id: str, value: float = 1.0, label: Optional[str] = None) -> None:
        pair = (source_id, target_id)
        seen = self._pair_counts.get(pair, 0)
        self._pair_counts[pair] = seen + 1
        link_id = f"{source_id}->{target_id}"
        if seen:
            link_id = f"{link_id}#{seen}"
        self._links.append(Link(
            source_id=source_id,
            target_id=target_id,
            value=float(value),
            label=label,
            link_id=link_id,
        ))

    def build(self) -> Graph:
        # Links to unregistered ids get placeholders sized and labelled
        # for this projection (the Graph default would ignore label_length)
        for link in self._links:
            for endpoint in (link.source_id, link.target_id):
                self.add_node(endpoint, PLACEHOLDER_WEIGHT, NORMAL)
        return Graph(self._nodes.values(), self._links)


# ============================================================
# PER-VARIANT PROJECTION
# ============================================================

def _project_connected_wallets(result: ConnectedWallets, builder: _GraphBuilder) -> None:
    for idx, wallet in enumerate(result.wallets):
        node_id = _record_id(wallet, ("address", "wallet")) or f"wallet-{idx}"
        weight = _first_number(wallet, ("degree", "transactionCount"), 1) * WEIGHT_MULTIPLIER
        degree = _as_number(wallet.get("degree")) if isinstance(wallet, Mapping) else None
        color = HIGH_ACTIVITY if degree is not None and degree > HIGH_DEGREE_THRESHOLD else NORMAL
        builder.add_node(node_id, weight, color, wallet)


def _project_chains(result: Chains, builder: _GraphBuilder) -> None:
    for idx, chain in enumerate(result.chains):
        source_id = _record_id(chain, ("sourceWallet",)) if isinstance(chain, Mapping) else None
        target_id = _record_id(chain, ("mainRecipient", "changeAddress")) if isinstance(chain, Mapping) else None
        source_id = source_id or f"source-{idx}"
        target_id = target_id or f"target-{idx}"

        builder.add_node(source_id, CHAIN_SOURCE_WEIGHT, HIGH_ACTIVITY)
        builder.add_node(target_id, CHAIN_TARGET_WEIGHT, NORMAL)

        amount = chain.get("totalAmount") if isinstance(chain, Mapping) else None
        builder.add_link(
            source_id,
            target_id,
            value=_as_number(amount) or 1.0,
            label=format_amount(amount),
        )


def _project_path(result: WalletPath, builder: _GraphBuilder) -> None:
    path = result.path
    last = len(path) - 1
    ids = [_record_id(step, ("address", "wallet")) or f"path-{idx}" for idx, step in enumerate(path)]

    for idx, (node_id, step) in enumerate(zip(ids, path)):
        if idx == 0:
            weight, color = PATH_END_WEIGHT, ORIGIN
        elif idx == last:
            weight, color = PATH_END_WEIGHT, HIGH_ACTIVITY
        else:
            weight, color = PATH_INNER_WEIGHT, NORMAL
        builder.add_node(node_id, weight, color, step)

    for source_id, target_id in zip(ids, ids[1:]):
        builder.add_link(source_id, target_id)


def _project_generic(result: GenericList, builder: _GraphBuilder) -> None:
    for idx, item in enumerate(result.items):
        node_id = _record_id(item, ("wallet", "address")) or f"node-{idx}"
        weight = _first_number(item, ("transactionCount", "degree"), 2) * WEIGHT_MULTIPLIER
        builder.add_node(node_id, weight, NORMAL, item)


_PROJECTIONS = {
    ConnectedWallets: _project_connected_wallets,
    Chains: _project_chains,
    WalletPath: _project_path,
    GenericList: _project_generic,
}


def project(result: Any, label_length: int = DEFAULT_LABEL_LENGTH) -> Graph:
    """Project a forensic result into the canonical Graph.

    `result` is an AnalysisResult variant or raw backend JSON; raw JSON is
    classified by key precedence first. Unknown shapes give an empty Graph.
    """
    typed: AnalysisResult = classify_result(result)
    handler = _PROJECTIONS.get(type(typed))
    if handler is None:
        return Graph.empty()

    builder = _GraphBuilder(label_length)
    handler(typed, builder)
    graph = builder.build()
    log.debug("Projected %s: %d nodes, %d links", typed.kind, len(graph.nodes), len(graph.links))
    return graph
