"""Profile completion score.

Completion answers: "How much of this profile is filled in?"

Each FieldSpec contributes its weight to the total. It contributes to the
completed weight when:
1. The value is filled (see form_types.is_filled), and
2. For verifiable contact fields, its ``<field>Verified`` flag is True.

percentage = round_half_up(100 * completed / total)

Design principles:
1. Pure function of (field specs, snapshot); no hidden counters
2. An empty table scores 0, never 100 (nothing is not "complete")
3. Rounding never reports 100 while any weighted field is incomplete
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from profile_engine.services.form_types import (
    CompletionResult,
    FieldSpec,
    GroupCompletion,
)

# =============================================================================
# Percentage
# =============================================================================

_FULL = 100
_ALMOST_FULL = 99


def completion_percentage(completed_weight: float, total_weight: float) -> int:
    """Convert weights into a 0..100 integer percentage.

    Args:
        completed_weight: Sum of weights of complete fields.
        total_weight: Sum of all weights.

    Returns:
        Integer percentage. 0 if total_weight is 0.

    Example:
        >>> completion_percentage(1, 3)
        33
        >>> completion_percentage(0, 0)
        0
    """
    if total_weight <= 0:
        return 0
    raw = 100 * completed_weight / total_weight
    percentage = max(0, min(_FULL, math.floor(raw + 0.5)))
    # 199.5/200 would round to 100; keep "100" for truly complete profiles
    if percentage == _FULL and completed_weight < total_weight:
        return _ALMOST_FULL
    return percentage


# =============================================================================
# Scoring
# =============================================================================


def score_completion(
    field_specs: Sequence[FieldSpec],
    snapshot: Mapping[str, Any],
) -> CompletionResult:
    """Compute weighted completion for a snapshot.

    Args:
        field_specs: FieldSpec table for the entity type.
        snapshot: Current form snapshot.

    Returns:
        CompletionResult with overall percentage and per-group breakdown.
    """
    completed_total = 0.0
    weight_total = 0.0
    group_completed: dict[str, float] = {}
    group_total: dict[str, float] = {}

    for spec in field_specs:
        weight_total += spec.weight
        group_total[spec.group] = group_total.get(spec.group, 0.0) + spec.weight
        group_completed.setdefault(spec.group, 0.0)
        if spec.is_complete(snapshot):
            completed_total += spec.weight
            group_completed[spec.group] += spec.weight

    groups = {
        group: GroupCompletion(
            completed_weight=group_completed[group],
            total_weight=total,
            percentage=completion_percentage(group_completed[group], total),
        )
        for group, total in group_total.items()
    }

    return CompletionResult(
        percentage=completion_percentage(completed_total, weight_total),
        completed_weight=completed_total,
        total_weight=weight_total,
        groups=groups,
    )


def missing_required_fields(
    field_specs: Sequence[FieldSpec],
    snapshot: Mapping[str, Any],
) -> list[str]:
    """Names of required fields that are not complete, in declaration order."""
    return [
        spec.name
        for spec in field_specs
        if spec.required and not spec.is_complete(snapshot)
    ]
