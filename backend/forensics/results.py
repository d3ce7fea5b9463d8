"""Typed analysis results returned by the forensic backend.

Each backend query produces one of five result variants:
- ConnectedWallets: unlinked set of wallets related to an address
- Chains: peel-chain records (source wallet -> recipient)
- WalletPath: ordered sequence of addresses
- GenericList: bare list of wallet records (centrality, outliers, ...)
- Unrecognized: anything else

Results are built once at the network boundary, where the endpoint is
known (`result_from_endpoint`). `classify_result` guesses the variant from
the keys present and is kept for raw JSON of unknown origin.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

log = logging.getLogger("chainscope.forensics.results")


@dataclass(frozen=True)
class ConnectedWallets:
    wallets: Tuple[Any, ...] = ()
    kind = "connected_wallets"


@dataclass(frozen=True)
class Chains:
    chains: Tuple[Any, ...] = ()
    kind = "chains"


@dataclass(frozen=True)
class WalletPath:
    path: Tuple[Any, ...] = ()
    kind = "path"


@dataclass(frozen=True)
class GenericList:
    items: Tuple[Any, ...] = ()
    kind = "generic_list"


@dataclass(frozen=True)
class Unrecognized:
    raw: Any = None
    kind = "unrecognized"


AnalysisResult = Union[ConnectedWallets, Chains, WalletPath, GenericList, Unrecognized]

RESULT_TYPES = (ConnectedWallets, Chains, WalletPath, GenericList, Unrecognized)


def is_analysis_result(value: Any) -> bool:
    return isinstance(value, RESULT_TYPES)


def _is_sequence(value: Any) -> bool:
    # JSON arrays only; strings and mappings are not sequences here
    return isinstance(value, (list, tuple))


def _frozen_copy(seq: Any) -> Tuple[Any, ...]:
    return tuple(copy.deepcopy(list(seq)))


# ============================================================
# SHAPE GUESSING (raw JSON of unknown origin)
# ============================================================

def classify_result(raw: Any) -> AnalysisResult:
    """Pick a variant from the keys present in `raw`.

    Precedence (first match wins): connectedWallets, chains, path,
    top-level array, anything else.
    """
    if is_analysis_result(raw):
        return raw

    if isinstance(raw, Mapping):
        if _is_sequence(raw.get("connectedWallets")):
            return ConnectedWallets(_frozen_copy(raw["connectedWallets"]))
        if _is_sequence(raw.get("chains")):
            return Chains(_frozen_copy(raw["chains"]))
        if _is_sequence(raw.get("path")):
            return WalletPath(_frozen_copy(raw["path"]))
    elif _is_sequence(raw):
        return GenericList(_frozen_copy(raw))

    log.debug("Unrecognized result shape: %s", type(raw).__name__)
    return Unrecognized(copy.deepcopy(raw))


# ============================================================
# ENDPOINT-BOUND CONSTRUCTION
# ============================================================

class Endpoint(Enum):
    """Known backend queries: (HTTP method, path template, variant, payload key)."""

    WALLET_NETWORK = ("GET", "/wallets/{address}/network", ConnectedWallets, "connectedWallets")
    PEEL_CHAINS = ("GET", "/algorithms/greedy/peel-chains", Chains, "chains")
    PEEL_CHAIN_CLUSTERS = ("GET", "/algorithms/greedy/peel-chain-clusters", Chains, "chains")
    SHORTEST_PATH = ("GET", "/path-analysis/shortest-path", WalletPath, "path")
    OPTIMAL_PATH = ("POST", "/forensic/branch-bound/optimal-path", WalletPath, "path")
    MAX_FLOW_PATH = ("POST", "/algorithms/dynamic-programming/max-flow-path", WalletPath, "path")
    BETWEENNESS_CENTRALITY = ("GET", "/network/betweenness-centrality", GenericList, None)
    NODE_IMPORTANCE = ("GET", "/network/node-importance", GenericList, None)
    OUTLIERS = ("GET", "/network/outliers", GenericList, None)

    def __init__(self, method: str, path: str, variant: type, payload_key: Optional[str]) -> None:
        self.method = method
        self.path = path
        self.variant = variant
        self.payload_key = payload_key

    @property
    def slug(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_slug(cls, slug: str) -> "Endpoint":
        key = (slug or "").strip().lower().replace("-", "_").upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown endpoint: {slug!r}") from None

    def describe(self) -> Dict[str, str]:
        return {
            "name": self.slug,
            "method": self.method,
            "path": self.path,
            "variant": self.variant.kind,
        }


def result_from_endpoint(endpoint: Endpoint, payload: Any) -> AnalysisResult:
    """Build the variant `endpoint` is known to produce.

    A bare list is accepted as the variant's sequence. Payloads missing the
    expected sequence degrade to Unrecognized.
    """
    variant = endpoint.variant
    key = endpoint.payload_key

    seq: Any = None
    if _is_sequence(payload):
        seq = payload
    elif key and isinstance(payload, Mapping) and _is_sequence(payload.get(key)):
        seq = payload[key]

    if seq is None:
        log.debug("Endpoint %s returned no %s sequence", endpoint.slug, variant.kind)
        return Unrecognized(copy.deepcopy(payload))

    return variant(_frozen_copy(seq))
