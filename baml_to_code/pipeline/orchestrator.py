"""
Pipeline orchestrator.

Stages declare ordering constraints as pairwise ``before``/``after``
predicates. The orchestrator turns them into a directed graph, sorts it
once per build and runs the stages in that order, stopping at the first
failure.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, replace

from ..errors import GenerationError, PipelineOrderError
from .context import BuildContext

logger = logging.getLogger(__name__)


class Stage(ABC):
    """A named transformation of the build context."""

    name: str = ""

    def before(self, other: Stage) -> bool:
        """Whether this stage must run before ``other``."""
        return False

    def after(self, other: Stage) -> bool:
        """Whether this stage must run after ``other``."""
        return False

    @abstractmethod
    def run(self, context: BuildContext) -> BuildContext:
        """
        Transform the context.

        Raises:
            GenerationError: To fail the build at this stage
        """

    def __repr__(self) -> str:
        return f"<Stage {self.name}>"


@dataclass(frozen=True)
class Completed:
    context: BuildContext


@dataclass(frozen=True)
class Failed:
    stage_name: str
    error: GenerationError

    def raise_error(self) -> None:
        raise self.error


PipelineResult = Completed | Failed


class Pipeline:
    """Runs stages in an order satisfying every declared constraint."""

    def __init__(self, stages: Sequence[Stage]):
        names = [stage.name for stage in stages]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate stage names: {', '.join(duplicates)}")
        self.stages = list(stages)

    def _edges(self) -> dict[str, list[str]]:
        """Map each stage name to the names of the stages that must follow it."""
        edges: dict[str, list[str]] = {stage.name: [] for stage in self.stages}
        for a in self.stages:
            for b in self.stages:
                if a is not b and (a.before(b) or b.after(a)):
                    edges[a.name].append(b.name)
        return edges

    def order(self) -> list[Stage]:
        """
        Sort the stages topologically.

        Among stages whose constraints are all met, declaration order
        decides, so the result is the same on every build.

        Raises:
            PipelineOrderError: If the constraints contain a cycle
        """
        edges = self._edges()
        indegree = {name: 0 for name in edges}
        for targets in edges.values():
            for target in targets:
                indegree[target] += 1

        by_name = {stage.name: stage for stage in self.stages}
        ordered: list[Stage] = []
        remaining = [stage.name for stage in self.stages]

        while remaining:
            ready = next((name for name in remaining if indegree[name] == 0), None)
            if ready is None:
                raise PipelineOrderError(_find_cycle(edges, remaining))
            remaining.remove(ready)
            ordered.append(by_name[ready])
            for target in edges[ready]:
                indegree[target] -= 1

        return ordered

    def run(self, context: BuildContext) -> PipelineResult:
        """
        Run every stage, stopping at the first failure.

        Returns:
            Completed with the final context, or Failed naming the stage

        Raises:
            PipelineOrderError: Before any stage runs, if the stages cannot be ordered
        """
        ordered = self.order()
        logger.debug("Pipeline order: %s", " -> ".join(stage.name for stage in ordered))

        for stage in ordered:
            logger.debug("Running stage %s", stage.name)
            try:
                context = stage.run(context)
            except GenerationError as e:
                logger.error("Stage %s failed: %s", stage.name, e)
                return Failed(stage_name=stage.name, error=e)
            context = replace(context, completed_stages=context.completed_stages + (stage.name,))

        return Completed(context=context)


def _find_cycle(edges: dict[str, list[str]], candidates: list[str]) -> list[str]:
    """Return the names of one cycle among the stages left unsorted."""
    candidate_set = set(candidates)
    predecessors: dict[str, list[str]] = {name: [] for name in candidates}
    for source, targets in edges.items():
        if source in candidate_set:
            for target in targets:
                if target in candidate_set:
                    predecessors[target].append(source)

    # Every unsorted stage still has an unsorted predecessor, so walking
    # backwards must revisit a stage
    path = [candidates[0]]
    while True:
        node = predecessors[path[-1]][0]
        if node in path:
            cycle = path[path.index(node) :]
            cycle.reverse()
            return cycle
        path.append(node)
