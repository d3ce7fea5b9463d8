"""Forensic graph module for ChainScopeWeb.

Provides:
- Canonical node/link graph model
- Typed analysis results with endpoint-bound construction
- Projection of heterogeneous backend results into one graph
- Hover-driven highlight engine
- Force-graph renderer bridge (JSON payloads, endpoint resolution)
- Per-view sessions that discard stale responses
"""
