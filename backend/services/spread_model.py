"""Projected point spreads between two fantasy rosters."""

from typing import Iterable, Mapping, Optional, Union

from schemas.league import ProjectedSpread, ProjectionRow

ProjectionLookup = Union[Mapping[str, float], Iterable[ProjectionRow]]


def build_projection_lookup(projections: ProjectionLookup) -> dict[str, float]:
    """Normalize projection rows or a mapping into player_id -> points."""
    if isinstance(projections, Mapping):
        return {str(k): float(v or 0.0) for k, v in projections.items()}

    lookup: dict[str, float] = {}
    for row in projections or []:
        if row is None or not row.player_id:
            continue
        lookup[row.player_id] = float(row.projection_points or 0.0)
    return lookup


def calculate_projected_total(
    starters: Optional[Iterable[Optional[str]]],
    projections: ProjectionLookup,
) -> float:
    """
    Sum the projected points of a roster's starters.

    Empty slots and players without a projection count as zero.
    """
    if not starters:
        return 0.0

    lookup = (
        projections
        if isinstance(projections, dict)
        else build_projection_lookup(projections)
    )
    total = 0.0
    for player_id in starters:
        if not player_id:
            continue
        total += lookup.get(str(player_id), 0.0)
    return total


def calculate_spread(
    starters_a: Optional[Iterable[Optional[str]]],
    starters_b: Optional[Iterable[Optional[str]]],
    projections: ProjectionLookup,
) -> ProjectedSpread:
    """
    Projected spread between side A and side B.

    A positive spread means side A is favored by that many points.
    """
    lookup = build_projection_lookup(projections)
    projected_a = calculate_projected_total(starters_a, lookup)
    projected_b = calculate_projected_total(starters_b, lookup)
    return ProjectedSpread(
        projected_a=projected_a,
        projected_b=projected_b,
        spread=projected_a - projected_b,
    )
