"""Per-view graph session: current graph, highlight state, request generations.

Each user action starts a request stamped with a new generation number.
A response is installed only while its generation is still the newest one
issued, so a slow older response can never overwrite a newer graph.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from .graph_model import Graph
from .highlight import HighlightEngine, HighlightState, Hovered
from .projector import project

log = logging.getLogger("chainscope.forensics.session")


class GraphSession:
    def __init__(self, label_length: Optional[int] = None) -> None:
        self._engine = HighlightEngine()
        self._generation = 0
        self._installed = 0
        self._label_length = label_length

    @property
    def graph(self) -> Graph:
        return self._engine.graph

    @property
    def highlight(self) -> HighlightState:
        return self._engine.state

    @property
    def generation(self) -> int:
        """Newest generation issued."""
        return self._generation

    @property
    def installed_generation(self) -> int:
        """Generation of the graph currently shown (0 = none yet)."""
        return self._installed

    def begin_request(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def apply(self, generation: int, result: Any) -> bool:
        """Project and install `result` unless a newer request was issued.

        Returns True when the graph was replaced.
        """
        if not self.is_current(generation):
            log.warning(
                "Discarding stale result (generation %d, newest %d)",
                generation, self._generation,
            )
            return False

        if self._label_length is None:
            graph = project(result)
        else:
            graph = project(result, label_length=self._label_length)
        self._engine.load(graph)
        self._installed = generation
        log.info(
            "Installed graph generation %d: %d nodes, %d links",
            generation, len(graph.nodes), len(graph.links),
        )
        return True

    async def refresh(self, fetch: Callable[[], Awaitable[Any]]) -> bool:
        """Run one fetch and install its result if still current."""
        generation = self.begin_request()
        result = await fetch()
        return self.apply(generation, result)

    def hover(self, hovered: Hovered) -> HighlightState:
        return self._engine.on_hover(hovered)

    def clear(self) -> None:
        """Drop the current graph; in-flight responses become stale."""
        self._generation += 1
        self._installed = 0
        self._engine.load(Graph.empty())
