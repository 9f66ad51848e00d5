"""
Deterministic allocation of a question count across groups.

This module covers the part of quiz assembly that does not depend on
randomness: choosing the groups in scope, resolving their weights, and
apportioning the requested total with the largest-remainder (Hamilton)
method. Arithmetic is done with fractions so shares such as 24.0 are never
floored to 23 by float error.
"""

import math
from collections import OrderedDict
from fractions import Fraction
from numbers import Real
from typing import Dict, Iterable, List, Optional

from ..core.errors import InvalidRequest, UnknownGroup
from ..core.models import Group, SamplingRequest


WEIGHT_TOLERANCE = 1e-6


def validate_total(total_requested) -> int:
    """
    Check that a requested question count is a positive integer.

    Raises:
        InvalidRequest: If the count is not a positive integer
    """
    if isinstance(total_requested, bool) or not isinstance(total_requested, int):
        raise InvalidRequest(f"total_requested must be an integer, got {total_requested!r}")
    if total_requested <= 0:
        raise InvalidRequest(f"total_requested must be positive, got {total_requested}")
    return total_requested


def select_groups(groups: List[Group], group_ids: Optional[Iterable[str]]) -> List[Group]:
    """
    Resolve the groups in scope, keeping the stable pool order.

    Args:
        groups: All configured groups in stable order
        group_ids: Requested group ids, or None for every group

    Returns:
        Selected groups in the order they appear in groups

    Raises:
        UnknownGroup: If a requested id is not configured
        InvalidRequest: If an explicit selection is empty
    """
    if group_ids is None:
        return list(groups)

    requested = list(group_ids)
    if not requested:
        raise InvalidRequest("At least one group must be selected")

    known = {group.id for group in groups}
    for group_id in requested:
        if group_id not in known:
            raise UnknownGroup(group_id, [group.id for group in groups])

    wanted = set(requested)
    return [group for group in groups if group.id in wanted]


def _normalize(weights: "OrderedDict[str, Fraction]") -> "OrderedDict[str, Fraction]":
    total = sum(weights.values())
    return OrderedDict((key, value * 100 / total) for key, value in weights.items())


def resolve_weights(groups: List[Group], request: SamplingRequest) -> "OrderedDict[str, Fraction]":
    """
    Work out the percentage weight of every group in the request's scope.

    Explicit weights must sum to 100 over the selected groups. Otherwise
    the configured weights of the selected groups are renormalized to 100;
    groups without any configured weight are weighted equally, as are all
    groups when request.equal_weights is set.

    Args:
        groups: All configured groups in stable order
        request: Sampling request

    Returns:
        Ordered mapping of group id to weight; weights sum to exactly 100

    Raises:
        UnknownGroup: If the request names a group that is not configured
        InvalidRequest: If explicit weights are malformed
    """
    if request.weights is not None:
        return _explicit_weights(groups, request)

    selected = select_groups(groups, request.group_ids)

    if request.equal_weights:
        return OrderedDict((group.id, Fraction(100, len(selected))) for group in selected)

    configured = OrderedDict(
        (group.id, Fraction(group.target_weight_percent)) for group in selected
    )
    if sum(configured.values()) <= 0:
        return OrderedDict((group.id, Fraction(100, len(selected))) for group in selected)

    return _normalize(configured)


def _explicit_weights(groups: List[Group], request: SamplingRequest) -> "OrderedDict[str, Fraction]":
    weights = request.weights
    known = [group.id for group in groups]

    for group_id, weight in weights.items():
        if group_id not in known:
            raise UnknownGroup(group_id, known)
        if (isinstance(weight, bool) or not isinstance(weight, Real)
                or not math.isfinite(weight) or weight < 0):
            raise InvalidRequest(f"Weight for group '{group_id}' must be a finite non-negative number")

    scope = request.group_ids if request.group_ids is not None else list(weights)
    selected = select_groups(groups, scope)
    selected_ids = {group.id for group in selected}

    outside = [group_id for group_id in weights if group_id not in selected_ids and weights[group_id] > 0]
    if outside:
        raise InvalidRequest(f"Weights given for unselected groups: {', '.join(outside)}")

    total = sum(weights.get(group.id, 0) for group in selected)
    if abs(total - 100) > WEIGHT_TOLERANCE:
        raise InvalidRequest(f"Explicit weights must sum to 100 over the selected groups, got {total}")

    return _normalize(
        OrderedDict((group.id, Fraction(weights.get(group.id, 0))) for group in selected)
    )


def apportion(total: int, weights: "OrderedDict[str, Fraction]") -> "OrderedDict[str, int]":
    """
    Split total across groups with the largest-remainder method.

    Each group first gets the floor of its ideal share; the units left over
    go one each to the groups with the largest fractional remainders, ties
    broken by group order.

    Args:
        total: Count to split
        weights: Ordered mapping of group id to weight, summing to 100

    Returns:
        Ordered mapping of group id to allocated count, summing to total
    """
    if not weights:
        return OrderedDict()

    raw = OrderedDict((key, Fraction(total) * Fraction(weight) / 100) for key, weight in weights.items())
    allocation = OrderedDict((key, math.floor(value)) for key, value in raw.items())

    leftover = total - sum(allocation.values())
    order = list(raw)
    by_remainder = sorted(
        range(len(order)),
        key=lambda i: (-(raw[order[i]] - allocation[order[i]]), i)
    )
    for i in by_remainder[:leftover]:
        allocation[order[i]] += 1

    return allocation


def allocate(groups: List[Group], request: SamplingRequest) -> "OrderedDict[str, int]":
    """
    Run the deterministic allocation steps for a request.

    Returns:
        Ordered mapping of group id to target count

    Raises:
        InvalidRequest: For a non-positive count or malformed weights
        UnknownGroup: For a group id that is not configured
    """
    total = validate_total(request.total_requested)
    return apportion(total, resolve_weights(groups, request))


def ideal_shares(total: int, weights: Dict[str, Fraction]) -> Dict[str, float]:
    """Real-valued share of every group, for reporting."""
    return {key: float(Fraction(total) * Fraction(weight) / 100) for key, weight in weights.items()}
