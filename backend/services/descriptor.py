"""
Wager descriptor grammar.

A spread wager is displayed as ``"<Team> <+/-Spread> vs <Opponent>"``,
for example ``"12 +3.5 vs 7"``. Team names are roster ids unless a
display name was supplied when the offer was built.
"""

import math
import re
from typing import NamedTuple, Optional

DESCRIPTOR_PATTERN = re.compile(r"^(.+?)\s+([+-]\d+\.?\d*)\s+vs\s+(.+)$")


class ParsedDescriptor(NamedTuple):
    team: str
    spread: float
    opponent: str


def round_to_tenth(value: float) -> float:
    """Round half up to one decimal place (2.25 -> 2.3, -2.25 -> -2.2)."""
    return math.floor(value * 10 + 0.5) / 10


def format_spread(spread: float) -> str:
    """Signed spread with one decimal, e.g. +3.5, -0.7, +0.0."""
    value = round_to_tenth(spread)
    if value == 0:
        value = 0.0  # avoid "-0.0"
    return f"{value:+.1f}"


def format_descriptor(team: str, spread: float, opponent: str) -> str:
    return f"{team} {format_spread(spread)} vs {opponent}"


def mirror_descriptor(descriptor: Optional[str]) -> Optional[str]:
    """
    The same line seen from the other side: teams swapped, spread sign flipped.

    The spread digits are kept exactly as written, so mirroring twice
    gives back the original descriptor ("12 +3.25 vs 7" <-> "7 -3.25 vs 12").
    Returns None if the descriptor does not follow the grammar.
    """
    if not descriptor:
        return None
    match = DESCRIPTOR_PATTERN.match(descriptor.strip())
    if not match:
        return None
    team, spread_str, opponent = match.groups()
    sign = "-" if spread_str[0] == "+" else "+"
    return f"{opponent} {sign}{spread_str[1:]} vs {team}"


def parse_descriptor(descriptor: Optional[str]) -> Optional[ParsedDescriptor]:
    """Parse a descriptor, or return None if it does not follow the grammar."""
    if not descriptor:
        return None
    match = DESCRIPTOR_PATTERN.match(descriptor.strip())
    if not match:
        return None
    team, spread_str, opponent = match.groups()
    return ParsedDescriptor(team=team, spread=float(spread_str), opponent=opponent)
