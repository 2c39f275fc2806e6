"""Scoring of simulation group results and building of scale-out plans."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Protocol

from scaladvisor.pricing import InstancePricing
from scaladvisor.scorer import (
    NodePlacement,
    NodeScore,
    NodeScorer,
    NodeScoreSelector,
    PodResourceInfo,
    WeightsFunc,
)
from scaladvisor.simgroup import SimGroupRunResult, SimRunResult

log = logging.getLogger(__name__)


class GeneratorError(Exception):
    """Raised when scaling advice cannot be generated."""


@dataclass(frozen=True)
class ScaleOutItem:
    """Number of nodes to add for one placement."""

    node_placement: NodePlacement
    current_replicas: int
    delta: int


@dataclass
class ScaleOutPlan:
    """Nodes to add, with the pods that still could not be placed."""

    unsatisfied_pod_names: list[str] = field(default_factory=list)
    items: list[ScaleOutItem] = field(default_factory=list)


@dataclass
class SimGroupScores:
    """All node scores of a group together with the winning one."""

    all_node_scores: list[NodeScore]
    winner_node_score: Optional[NodeScore]
    winner_node: Any = None


class _RunnableGroup(Protocol):
    def run(self) -> SimGroupRunResult: ...


def group_by_node_placement(
    node_scores: Iterable[NodeScore],
) -> dict[NodePlacement, list[NodeScore]]:
    """Group node scores by their placement, keeping their order."""
    grouped: dict[NodePlacement, list[NodeScore]] = defaultdict(list)
    for score in node_scores:
        grouped[score.placement].append(score)
    return dict(grouped)


def create_scale_out_plan(
    winning_node_scores: Iterable[NodeScore],
    existing_node_count_by_placement: Mapping[NodePlacement, int],
    pending_unscheduled_pods: Iterable[PodResourceInfo],
) -> ScaleOutPlan:
    """Build a scale-out plan with one item per placement of the winners."""
    items = [
        ScaleOutItem(
            node_placement=placement,
            current_replicas=existing_node_count_by_placement.get(placement, 0),
            delta=len(scores),
        )
        for placement, scores in group_by_node_placement(winning_node_scores).items()
    ]
    names = [f"{pod.namespace}/{pod.name}" for pod in pending_unscheduled_pods]
    return ScaleOutPlan(unsatisfied_pod_names=names, items=items)


def _scaled_node_of_winner(results: Iterable[SimRunResult], winner: NodeScore) -> Any:
    return next(
        (r.scaled_node for r in results if r.node_scorer_args.id == winner.id), None
    )


def compute_sim_group_scores(
    pricing: InstancePricing,
    weights_fn: WeightsFunc,
    scorer: NodeScorer,
    selector: NodeScoreSelector,
    group_result: SimGroupRunResult,
) -> SimGroupScores:
    """Score each simulation of a group and select the winner."""
    node_scores = []
    for result in group_result.simulation_results:
        try:
            node_scores.append(scorer.compute(result.node_scorer_args))
        except Exception as exc:
            raise GeneratorError(
                f"node scoring failed for simulation {result.name!r} "
                f"of group {group_result.name!r}: {exc}"
            ) from exc
    try:
        winner = selector(node_scores, weights_fn, pricing)
    except Exception as exc:
        raise GeneratorError(
            f"node score selection failed for group {group_result.name!r}: {exc}"
        ) from exc
    return SimGroupScores(
        all_node_scores=node_scores,
        winner_node_score=winner,
        winner_node=_scaled_node_of_winner(group_result.simulation_results, winner),
    )


def run_pass(
    groups: Iterable[_RunnableGroup],
    pricing: InstancePricing,
    weights_fn: WeightsFunc,
    scorer: NodeScorer,
    selector: NodeScoreSelector,
) -> tuple[list[NodeScore], list]:
    """Run groups in order, collecting each group's winning node score.

    Stops after the first group whose winner leaves no unscheduled pods.
    Returns the winners and the pods still unscheduled by the last winner.
    """
    winners: list[NodeScore] = []
    unscheduled: list = []
    for group in groups:
        group_result = group.run()
        scores = compute_sim_group_scores(
            pricing, weights_fn, scorer, selector, group_result
        )
        winner = scores.winner_node_score
        if winner is None:
            log.info(
                "simulation group %r produced no winning score, skipping it",
                group_result.name,
            )
            continue
        winners.append(winner)
        unscheduled = list(winner.unscheduled_pods)
        if not unscheduled:
            log.info(
                "winner of simulation group %r left no unscheduled pods",
                group_result.name,
            )
            break
    return winners, unscheduled