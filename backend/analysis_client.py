"""Async HTTP client for the forensic analysis backend.

Every query returns a typed AnalysisResult built for the endpoint that was
called, so no shape guessing happens downstream.

Default base URL: http://127.0.0.1:8080/api
Override via argument, env CHAINSCOPE_API_URL, or settings.
"""

from __future__ import annotations

import logging
import string
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from .forensics.results import AnalysisResult, Endpoint, result_from_endpoint
from .settings_store import load_settings

log = logging.getLogger("chainscope.analysis_client")


class AnalysisBackendError(RuntimeError):
    pass


def _split_path_params(template: str, params: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Fill `{name}` placeholders of `template`; return (path, leftover params)."""
    names = [f for _, f, _, _ in string.Formatter().parse(template) if f]
    missing = [n for n in names if params.get(n) in (None, "")]
    if missing:
        raise AnalysisBackendError(f"Missing path parameter(s): {', '.join(missing)}")
    path = template.format(**{n: quote(str(params[n]), safe="") for n in names})
    rest = {k: v for k, v in params.items() if k not in names and v is not None}
    return path, rest


class AnalysisClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = load_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    # ------------- low-level HTTP -------------
    async def _request_json(self, method: str, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        kwargs: Dict[str, Any] = {"json": params} if method == "POST" else {"params": params}
        log.info("%s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.request(method, url, **kwargs)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise AnalysisBackendError(f"Backend HTTP {e.response.status_code}: {body or e.response.reason_phrase}") from e
        except httpx.HTTPError as e:
            raise AnalysisBackendError(f"Backend request failed: {e}") from e
        except ValueError as e:
            raise AnalysisBackendError(f"Backend returned invalid JSON: {e}") from e

    # ------------- public API -------------
    async def query(self, endpoint: Endpoint, **params: Any) -> AnalysisResult:
        """Call `endpoint` and wrap the payload in its result variant."""
        path, rest = _split_path_params(endpoint.path, params)
        payload = await self._request_json(endpoint.method, path, rest)
        return result_from_endpoint(endpoint, payload)

    async def wallet_network(self, address: str) -> AnalysisResult:
        return await self.query(Endpoint.WALLET_NETWORK, address=address)

    async def peel_chains(self, threshold: float = 0.7, limit: int = 10) -> AnalysisResult:
        return await self.query(Endpoint.PEEL_CHAINS, threshold=threshold, limit=limit)

    async def peel_chain_clusters(
        self, threshold: float = 0.7, min_chain_length: int = 3, limit: int = 10
    ) -> AnalysisResult:
        return await self.query(
            Endpoint.PEEL_CHAIN_CLUSTERS,
            threshold=threshold, minChainLength=min_chain_length, limit=limit,
        )

    async def shortest_path(self, address1: str, address2: str) -> AnalysisResult:
        return await self.query(Endpoint.SHORTEST_PATH, address1=address1, address2=address2)

    async def optimal_path(self, source_wallet: str, target_wallet: str, max_cost: float) -> AnalysisResult:
        return await self.query(
            Endpoint.OPTIMAL_PATH,
            sourceWallet=source_wallet, targetWallet=target_wallet, maxCost=max_cost,
        )

    async def max_flow_path(self, source_wallet: str, target_wallet: str, max_hops: int = 10) -> AnalysisResult:
        return await self.query(
            Endpoint.MAX_FLOW_PATH,
            sourceWallet=source_wallet, targetWallet=target_wallet, maxHops=max_hops,
        )

    async def betweenness_centrality(self, top_n: int = 10) -> AnalysisResult:
        return await self.query(Endpoint.BETWEENNESS_CENTRALITY, topN=top_n)

    async def node_importance(self, top_n: int = 10) -> AnalysisResult:
        return await self.query(Endpoint.NODE_IMPORTANCE, topN=top_n)

    async def outliers(self) -> AnalysisResult:
        return await self.query(Endpoint.OUTLIERS)
