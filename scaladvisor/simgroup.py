"""Grouping of simulations by priority and concurrent running of each group."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol

from scaladvisor.scorer import NodeScorerArgs


class SimulationGroupError(Exception):
    """Raised when a simulation group fails to run."""


@dataclass(frozen=True, order=True)
class SimGroupKey:
    """Priorities that decide which simulations are run together."""

    node_pool_priority: int = 0
    node_template_priority: int = 0

    def __str__(self) -> str:
        return f"{self.node_pool_priority}-{self.node_template_priority}"


@dataclass
class SimRunResult:
    """Outcome of one simulation run."""

    name: str
    node_scorer_args: NodeScorerArgs
    scaled_node: Any = None


@dataclass
class SimGroupRunResult:
    """Outcome of running every simulation of a group."""

    name: str
    key: SimGroupKey
    simulation_results: list[SimRunResult] = field(default_factory=list)


class Simulation(Protocol):
    """A single simulation of scaling one node template in one zone."""

    name: str
    node_pool: Any
    node_template: Any

    def run(self) -> None: ...

    def result(self) -> SimRunResult: ...


class SimulationGroup:
    """Simulations sharing the same node pool and node template priorities."""

    def __init__(
        self,
        name: str,
        key: SimGroupKey,
        simulations: Optional[Iterable[Simulation]] = None,
    ):
        self.name = name
        self.key = key
        self.simulations: list[Simulation] = list(simulations or [])

    def __repr__(self) -> str:
        return (
            f"SimulationGroup(name={self.name!r}, key={self.key!r}, "
            f"simulations={len(self.simulations)})"
        )

    def run(self) -> SimGroupRunResult:
        """Run all simulations concurrently and collect their results."""
        try:
            if self.simulations:
                with ThreadPoolExecutor(max_workers=len(self.simulations)) as pool:
                    futures = [pool.submit(sim.run) for sim in self.simulations]
                errors = [f.exception() for f in futures if f.exception() is not None]
                if errors:
                    raise errors[0]
            results = [sim.result() for sim in self.simulations]
        except Exception as exc:
            raise SimulationGroupError(
                f"simulation group {self.name!r} failed: {exc}"
            ) from exc
        return SimGroupRunResult(
            name=self.name, key=self.key, simulation_results=results
        )


def _key_of(simulation: Simulation) -> SimGroupKey:
    return SimGroupKey(
        node_pool_priority=simulation.node_pool.priority,
        node_template_priority=simulation.node_template.priority,
    )


def sort_groups(groups: list[SimulationGroup]) -> None:
    """Sort groups in place by node pool priority, then node template priority."""
    groups.sort(
        key=lambda g: (g.key.node_pool_priority, g.key.node_template_priority)
    )


def create_simulation_groups(
    simulations: Iterable[Simulation],
) -> list[SimulationGroup]:
    """Group simulations by their priority key and return the groups sorted."""
    groups_by_key: dict[SimGroupKey, SimulationGroup] = {}
    for sim in simulations:
        key = _key_of(sim)
        group = groups_by_key.get(key)
        if group is None:
            name = f"{sim.node_pool.name}_{sim.node_template.name}_{key}"
            groups_by_key[key] = SimulationGroup(name, key, [sim])
        else:
            group.simulations.append(sim)
    groups = list(groups_by_key.values())
    sort_groups(groups)
    return groups