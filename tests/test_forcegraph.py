"""Tests for backend.forensics.forcegraph: renderer payloads and endpoint resolution."""

from __future__ import annotations

import copy

from backend.forensics.forcegraph import (
    NODE_COLORS,
    endpoint_id,
    graph_from_force_graph,
    highlight_payload,
    to_force_graph,
)
from backend.forensics.highlight import IDLE, compute_highlight
from backend.forensics.projector import project


def _rendered(payload: dict) -> dict:
    """Mimic the layout engine: endpoints become node objects, positions added."""
    out = copy.deepcopy(payload)
    by_id = {}
    for i, node in enumerate(out["nodes"]):
        node.update({"x": 10.0 * i, "y": -3.5, "vx": 0.1, "vy": 0.0, "index": i})
        by_id[node["id"]] = node
    for link in out["links"]:
        link["source"] = by_id[link["source"]]
        link["target"] = by_id[link["target"]]
    return out


class TestToForceGraph:
    def test_node_entries(self, network_result):
        payload = to_force_graph(project(network_result))
        first = payload["nodes"][0]
        assert first["id"] == "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh"
        assert first["name"] == "bc1qxy2k..."
        assert first["val"] == 18
        assert first["color"] == NODE_COLORS["high-activity"]
        assert first["colorClass"] == "high-activity"
        # raw record fields ride along for tooltips
        assert first["degree"] == 9
        assert first["address"] == first["id"]

    def test_raw_fields_never_override(self):
        payload = to_force_graph(project([{"wallet": "w", "id": "bogus", "color": "red"}]))
        node = payload["nodes"][0]
        assert node["id"] == "w"
        assert node["color"] == NODE_COLORS["normal"]

    def test_link_entries(self, chains_result):
        payload = to_force_graph(project(chains_result))
        assert payload["links"][0] == {
            "id": "s1->r1",
            "source": "s1",
            "target": "r1",
            "value": 500.0,
            "label": "500 BTC",
        }
        assert payload["stats"]["total_nodes"] == 5
        assert payload["stats"]["total_links"] == 3

    def test_origin_color(self):
        payload = to_force_graph(project({"path": ["a", "b"]}))
        assert payload["nodes"][0]["color"] == "#51cf66"


class TestEndpointId:
    def test_plain_and_resolved(self):
        assert endpoint_id("w1") == "w1"
        assert endpoint_id({"id": "w1", "x": 3}) == "w1"
        assert endpoint_id(7) == "7"

    def test_object_reference(self):
        class Rendered:
            id = "w9"

        assert endpoint_id(Rendered()) == "w9"

    def test_unresolvable(self):
        assert endpoint_id(None) is None
        assert endpoint_id("") is None
        assert endpoint_id(True) is None
        assert endpoint_id({"name": "no id"}) is None


class TestGraphFromForceGraph:
    def test_roundtrip_after_render(self, path_result):
        graph = project(path_result)
        rebuilt = graph_from_force_graph(_rendered(to_force_graph(graph)))
        assert rebuilt == graph

    def test_missing_nodes_become_placeholders(self):
        g = graph_from_force_graph({"nodes": [], "links": [{"source": "a", "target": {"id": "b"}}]})
        assert set(g.node_ids) == {"a", "b"}
        assert g.links[0].link_id == "a->b"

    def test_unresolved_links_dropped(self):
        g = graph_from_force_graph({"nodes": [{"id": "a"}], "links": [{"source": "a", "target": None}, "junk"]})
        assert g.node_ids == ["a"]
        assert g.links == ()

    def test_garbage(self):
        assert graph_from_force_graph(None).is_empty
        assert graph_from_force_graph({"nodes": ["x", 3], "links": None}).is_empty

    def test_out_of_range_numbers_use_defaults(self):
        payload = {
            "nodes": [{"id": "a", "val": 10 ** 400}, {"id": "b", "val": "1e400"}],
            "links": [{"source": "a", "target": "b", "value": 10 ** 400}],
        }
        g = graph_from_force_graph(payload)
        assert g.node("a").weight == 1.0
        assert g.node("b").weight == 1.0
        assert g.links[0].value == 1.0


class TestHighlightPayload:
    def test_idle(self):
        assert highlight_payload(IDLE) == {"hovered": None, "nodes": [], "links": []}

    def test_after_render(self, chains_result):
        # hover resolution keeps working once endpoints are node objects
        rendered = _rendered(to_force_graph(project(chains_result)))
        graph = graph_from_force_graph(rendered)
        payload = highlight_payload(compute_highlight(graph, "s1"))
        assert payload == {
            "hovered": "s1",
            "nodes": ["c2", "r1", "s1"],
            "links": ["s1->c2", "s1->r1"],
        }
