"""Node scoring strategies and selection of winning node scores."""

from __future__ import annotations

import math
import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Union

from scaladvisor.pricing import InstancePricing, PricingError

WeightsFunc = Callable[[str], dict[str, float]]


class ScoringError(Exception):
    """Raised when a node score cannot be computed or selected."""


class UnsupportedScoringStrategyError(ScoringError, ValueError):
    """Raised for an unknown node scoring strategy."""


class NoWinningNodeScoreError(ScoringError):
    """Raised when there are no node scores to select a winner from."""


class NodeScoringStrategy(str, Enum):
    LEAST_COST = "LeastCost"
    LEAST_WASTE = "LeastWaste"


@dataclass(frozen=True)
class NodePlacement:
    """Where a scaled node is placed."""

    node_pool_name: str = ""
    node_template_name: str = ""
    instance_type: str = ""
    region: str = ""
    availability_zone: str = ""


@dataclass
class NodeResourceInfo:
    name: str
    instance_type: str = ""
    capacity: dict[str, int] = field(default_factory=dict)
    allocatable: dict[str, int] = field(default_factory=dict)


@dataclass
class PodResourceInfo:
    name: str
    namespace: str = "default"
    uid: str = ""
    aggregated_requests: dict[str, int] = field(default_factory=dict)

    @property
    def namespaced_name(self) -> tuple[str, str]:
        return (self.namespace, self.name)


@dataclass
class NodePodAssignment:
    node: NodeResourceInfo
    scheduled_pods: list[PodResourceInfo] = field(default_factory=list)


@dataclass
class NodeScorerArgs:
    id: str
    placement: NodePlacement
    scaled_assignment: NodePodAssignment
    other_assignments: list[NodePodAssignment] = field(default_factory=list)
    unscheduled_pods: list = field(default_factory=list)


@dataclass
class NodeScore:
    id: str
    placement: NodePlacement
    value: int
    scaled_node_resource: NodeResourceInfo
    unscheduled_pods: list = field(default_factory=list)


class NodeScorer(Protocol):
    def compute(self, args: NodeScorerArgs) -> NodeScore: ...


NodeScoreSelector = Callable[
    [list[NodeScore], WeightsFunc, InstancePricing], NodeScore
]


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _aggregated_scheduled_pods_resources(
    scaled: NodePodAssignment, others: Optional[Iterable[NodePodAssignment]]
) -> Counter:
    """Sum the requests of pods placed on the scaled node and on existing nodes."""
    totals: Counter = Counter()
    for assignment in [scaled, *(others or [])]:
        for pod in assignment.scheduled_pods:
            totals.update(pod.aggregated_requests)
    return totals


def _normalized_units(quantities: dict[str, int], weights: dict[str, float]) -> float:
    return sum(
        weights[name] * quantity
        for name, quantity in quantities.items()
        if name in weights
    )


@dataclass
class LeastCost:
    """Scores by weighted resource units scheduled per unit of hourly price."""

    pricing: InstancePricing
    weights_fn: WeightsFunc

    def compute(self, args: NodeScorerArgs) -> NodeScore:
        try:
            resources = _aggregated_scheduled_pods_resources(
                args.scaled_assignment, args.other_assignments
            )
            weights = self.weights_fn(args.placement.instance_type)
            total_units = _normalized_units(resources, weights)
            info = self.pricing.get_info(
                args.placement.region, args.placement.instance_type
            )
            if info.hourly_price == 0:
                raise ScoringError(
                    f"hourly price of {args.placement.instance_type!r} is zero"
                )
            value = _round_half_away(total_units * 100 / info.hourly_price)
        except (ScoringError, PricingError, LookupError, ValueError) as exc:
            raise ScoringError(
                f"least-cost node scoring failed for simulation {args.id!r}: {exc}"
            ) from exc
        return NodeScore(
            id=args.id,
            placement=args.placement,
            value=value,
            scaled_node_resource=args.scaled_assignment.node,
            unscheduled_pods=args.unscheduled_pods,
        )


@dataclass
class LeastWaste:
    """Scores by weighted delta wastage caused by scaling up a node.

    Waste is the allocatable of the scaled node minus the requests of all pods
    scheduled due to the scale-up, including those placed on existing nodes, so
    it can become negative.
    """

    pricing: InstancePricing
    weights_fn: WeightsFunc

    def compute(self, args: NodeScorerArgs) -> NodeScore:
        wastage = dict(args.scaled_assignment.node.allocatable)
        requests = _aggregated_scheduled_pods_resources(
            args.scaled_assignment, args.other_assignments
        )
        for name, request in requests.items():
            if name in wastage:
                wastage[name] -= request
        weights = self.weights_fn(args.placement.instance_type)
        total_units = 0.0
        for name, waste in wastage.items():
            if name not in weights:
                raise ScoringError(f"no weight found for resourceName {name}")
            total_units += weights[name] * waste
        return NodeScore(
            id=args.id,
            placement=args.placement,
            value=int(total_units * 100),
            scaled_node_resource=args.scaled_assignment.node,
            unscheduled_pods=args.unscheduled_pods,
        )


def _as_strategy(scoring_strategy: Union[str, NodeScoringStrategy]) -> NodeScoringStrategy:
    try:
        return NodeScoringStrategy(scoring_strategy)
    except ValueError:
        raise UnsupportedScoringStrategyError(
            f"unsupported node scoring strategy {scoring_strategy!r}"
        ) from None


def get_node_scorer(
    scoring_strategy: Union[str, NodeScoringStrategy],
    pricing: InstancePricing,
    weights_fn: WeightsFunc,
) -> NodeScorer:
    """Return the node scorer for the given strategy."""
    strategy = _as_strategy(scoring_strategy)
    if strategy is NodeScoringStrategy.LEAST_COST:
        return LeastCost(pricing, weights_fn)
    return LeastWaste(pricing, weights_fn)


def get_node_score_selector(
    scoring_strategy: Union[str, NodeScoringStrategy],
) -> NodeScoreSelector:
    """Return the winner selector matching the given strategy."""
    strategy = _as_strategy(scoring_strategy)
    if strategy is NodeScoringStrategy.LEAST_COST:
        return select_max_allocatable
    return select_min_price


def _pick_best(scores: list[NodeScore], metrics: list[float], best: float) -> NodeScore:
    winners = [score for score, metric in zip(scores, metrics) if metric == best]
    return random.choice(winners)


def select_max_allocatable(
    node_scores: list[NodeScore],
    weights_fn: WeightsFunc,
    pricing: InstancePricing,
) -> NodeScore:
    """Return the score whose node has the largest weighted allocatable.

    Larger nodes mean less fragmentation; ties are broken at random.
    """
    if not node_scores:
        raise NoWinningNodeScoreError("no winning node score")
    if len(node_scores) == 1:
        return node_scores[0]
    allocs = [
        _normalized_units(
            score.scaled_node_resource.allocatable,
            weights_fn(score.placement.instance_type),
        )
        for score in node_scores
    ]
    return _pick_best(node_scores, allocs, max(allocs))


def select_min_price(
    node_scores: list[NodeScore],
    weights_fn: WeightsFunc,
    pricing: InstancePricing,
) -> NodeScore:
    """Return the score whose instance type has the lowest hourly price.

    Ties are broken at random.
    """
    if not node_scores:
        raise NoWinningNodeScoreError("no winning node score")
    if len(node_scores) == 1:
        return node_scores[0]
    prices = [
        pricing.get_info(score.placement.region, score.placement.instance_type).hourly_price
        for score in node_scores
    ]
    return _pick_best(node_scores, prices, min(prices))