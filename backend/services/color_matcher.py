"""
Color Matcher — ranks catalog pencils against a sampled color.

Uses CIEDE2000 in CIELAB space as the only ranking metric. Ties keep catalog
order (stable sort), so results are reproducible for a given catalog.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .catalog import Pencil, get_composite_id, merge_catalogs
from .color_space import InvalidColorFormat, hex_to_rgb, rgb_to_lab
from .delta_e import delta_e_ciede2000

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5

# Empirical confidence scale
INDISTINGUISHABLE_DELTA_E = 1.0
POOR_MATCH_DELTA_E = 20.0
CONFIDENCE_SLOPE = 4.5
MAX_CONFIDENCE = 99
MIN_CONFIDENCE = 10

# An owned pencil is only promoted over a closer one when it is still decent
OWNED_PRIORITY_THRESHOLD = 10.0


@dataclass(frozen=True)
class MatchFilter:
    allowed_brands: Optional[frozenset[str]] = None
    restrict_to_ids: Optional[frozenset[str]] = None
    owned_ids: Optional[frozenset[str]] = None
    prioritize_owned: bool = False

    @classmethod
    def build(
        cls,
        allowed_brands: Optional[Iterable[str]] = None,
        restrict_to_ids: Optional[Iterable[str]] = None,
        owned_ids: Optional[Iterable[str]] = None,
        prioritize_owned: bool = False,
    ) -> "MatchFilter":
        return cls(
            allowed_brands=frozenset(allowed_brands) if allowed_brands else None,
            restrict_to_ids=None if restrict_to_ids is None else frozenset(restrict_to_ids),
            owned_ids=None if owned_ids is None else frozenset(owned_ids),
            prioritize_owned=prioritize_owned,
        )

    def accepts(self, pencil: Pencil) -> bool:
        # An empty brand list means every brand
        if self.allowed_brands and pencil.brand not in self.allowed_brands:
            return False
        if self.restrict_to_ids is not None and get_composite_id(pencil) not in self.restrict_to_ids:
            return False
        return True


@dataclass(frozen=True)
class MatchResult:
    pencil: Pencil
    distance: float
    confidence: int
    is_owned: bool = False

    def to_dict(self) -> dict:
        return {
            "pencil": self.pencil.to_dict(),
            "distance": round(self.distance, 4),
            "confidence": self.confidence,
            "is_owned": self.is_owned,
        }


def confidence_from_distance(distance: float) -> int:
    """
    Map a Delta E to a percentage in [10, 99].

      ΔE <= 1  → 99 (never 100)
      ΔE >= 20 → 10
      else     → round(100 - 4.5·ΔE), halves rounding up
    """
    if distance <= INDISTINGUISHABLE_DELTA_E:
        return MAX_CONFIDENCE
    if distance >= POOR_MATCH_DELTA_E:
        return MIN_CONFIDENCE
    return max(MIN_CONFIDENCE, math.floor(100 - distance * CONFIDENCE_SLOPE + 0.5))


def _candidate_distance(target_lab: tuple[float, float, float], pencil: Pencil) -> float:
    try:
        rgb = pencil.rgb
    except InvalidColorFormat:
        logger.warning(f"Ignoring pencil {get_composite_id(pencil)} with unparsable color {pencil.hex!r}")
        return math.inf
    return delta_e_ciede2000(target_lab, rgb_to_lab(*rgb))


def find_top_matches(
    target_hex: str,
    catalog: Sequence[Pencil],
    limit: int = DEFAULT_LIMIT,
    match_filter: Optional[MatchFilter] = None,
) -> list[MatchResult]:
    """
    Return up to `limit` pencils closest to `target_hex`, best first.

    Raises InvalidColorFormat if the target color is malformed. Catalog
    entries with a corrupt color are scored as infinitely far and never
    returned.
    """
    target_lab = rgb_to_lab(*hex_to_rgb(target_hex))
    match_filter = match_filter or MatchFilter()
    limit = max(0, limit)
    if limit == 0:
        return []

    owned = match_filter.owned_ids or frozenset()
    scored: list[tuple[Pencil, float]] = [
        (pencil, _candidate_distance(target_lab, pencil))
        for pencil in catalog
        if match_filter.accepts(pencil)
    ]
    # list.sort is stable: equal distances keep catalog order
    scored.sort(key=lambda item: item[1])
    scored = [item for item in scored if not math.isinf(item[1])]

    if match_filter.prioritize_owned and owned:
        scored = _promote_best_owned(scored, owned)

    logger.debug(f"Matched {target_hex} against {len(scored)} candidates (limit={limit})")

    return [
        MatchResult(
            pencil=pencil,
            distance=distance,
            confidence=confidence_from_distance(distance),
            is_owned=get_composite_id(pencil) in owned,
        )
        for pencil, distance in scored[:limit]
    ]


def _promote_best_owned(
    scored: list[tuple[Pencil, float]],
    owned: frozenset[str],
) -> list[tuple[Pencil, float]]:
    """Move the closest owned pencil to the front if it is close enough."""
    for index, (pencil, distance) in enumerate(scored):
        if get_composite_id(pencil) in owned:
            if index > 0 and distance < OWNED_PRIORITY_THRESHOLD:
                return [scored[index]] + scored[:index] + scored[index + 1:]
            break
    return scored


def find_best_match(
    target_hex: str,
    catalog: Sequence[Pencil],
    match_filter: Optional[MatchFilter] = None,
) -> Optional[MatchResult]:
    matches = find_top_matches(target_hex, catalog, 1, match_filter)
    return matches[0] if matches else None


class ColorMatcher:
    """Matcher bound to a built-in catalog; custom pencils are passed per call."""

    def __init__(self, built_in: Sequence[Pencil]) -> None:
        self._built_in = tuple(built_in)

    @property
    def built_in(self) -> tuple[Pencil, ...]:
        return self._built_in

    def catalog(self, custom: Iterable[Pencil] = ()) -> list[Pencil]:
        return merge_catalogs(self._built_in, custom)

    def find_top_matches(
        self,
        target_hex: str,
        limit: int = DEFAULT_LIMIT,
        match_filter: Optional[MatchFilter] = None,
        custom: Iterable[Pencil] = (),
    ) -> list[MatchResult]:
        return find_top_matches(target_hex, self.catalog(custom), limit, match_filter)

    def find_best_match(
        self,
        target_hex: str,
        match_filter: Optional[MatchFilter] = None,
        custom: Iterable[Pencil] = (),
    ) -> Optional[MatchResult]:
        return find_best_match(target_hex, self.catalog(custom), match_filter)
