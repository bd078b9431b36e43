#!/usr/bin/env python3
"""
Report Aggregation
==================
Folds a completed session's round results into the end-of-session report:

- overall and per-channel percentages (10 points per round ceiling)
- percentile against age-bracket norms
- archetype (first matching rule of an ordered list)
- strongest / weakest channel
- near-miss tally

The percentile is a linear stand-in for a normal-distribution lookup:
one standard deviation is worth 20 percentile points around the median and
the result saturates at 1 and 99. It is kept as is because changing it would
change every published score.
"""

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Sequence, Tuple

from lexaccess.models import (
    AgeNorm,
    Channel,
    CHANNEL_ORDER,
    ChannelScore,
    Report,
    RoundResult,
)
from lexaccess.scoring import compute_round_score, default_policy
from lexaccess.settings import get_setting, require_setting

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


# =============================================================================
# Age Norms
# =============================================================================

def _load_norms() -> Mapping[str, AgeNorm]:
    brackets = require_setting("norms.brackets")
    return MappingProxyType({
        str(label): AgeNorm(mean=float(v['mean']), sd=float(v['sd']))
        for label, v in brackets.items()
    })


AGE_NORMS: Mapping[str, AgeNorm] = _load_norms()
DEFAULT_BRACKET: str = require_setting("norms.default_bracket")
if DEFAULT_BRACKET not in AGE_NORMS:
    raise ValueError(f"norms.default_bracket '{DEFAULT_BRACKET}' is not a configured bracket")


def _canonical_bracket(label: str) -> str:
    # Brackets use an en dash; accept the ASCII hyphen people type.
    return (label or "").strip().replace("-", "–")


def resolve_norm(age_bracket: str) -> Tuple[str, AgeNorm]:
    """
    Look up the norm for an age bracket.

    Unknown brackets fall back to the default bracket rather than failing.

    Returns:
        (bracket label actually used, AgeNorm)
    """
    label = _canonical_bracket(age_bracket)
    if label in AGE_NORMS:
        return label, AGE_NORMS[label]
    logger.warning(f"Unknown age bracket {age_bracket!r}, using {DEFAULT_BRACKET}")
    return DEFAULT_BRACKET, AGE_NORMS[DEFAULT_BRACKET]


def percentile_for(pct: float, norm: AgeNorm) -> int:
    """Map an overall percentage to a clamped linear percentile."""
    center = get_setting("norms.percentile.center", 50)
    scale = get_setting("norms.percentile.points_per_sd", 20)
    floor = get_setting("norms.percentile.floor", 1)
    ceiling = get_setting("norms.percentile.ceiling", 99)

    z = (pct - norm.mean) / norm.sd
    return round_half_up(min(ceiling, max(floor, center + z * scale)))


# =============================================================================
# Archetypes
# =============================================================================

@dataclass(frozen=True)
class Archetype:
    """A named profile; condition takes (overall, phono, semantic, mixed)."""
    name: str
    icon: str
    condition: Callable[[int, int, int, int], bool]
    description: str

    def matches(self, pct: int, phono: int, semantic: int, mixed: int) -> bool:
        return bool(self.condition(pct, phono, semantic, mixed))


# Order matters: the first satisfied rule wins and the last always matches.
ARCHETYPES: Tuple[Archetype, ...] = (
    Archetype(
        name="The Connector",
        icon="🔗",
        condition=lambda p, ph, sm, mx: p >= 80 and abs(ph - sm) <= 10,
        description=(
            "Your lexical networks are exceptionally dense and fast. You navigate by "
            "sound and meaning with equal ease, and the toughest mixed-mode challenges "
            "barely slow you down. You're the kind of thinker who makes unexpected "
            "verbal connections others miss."
        ),
    ),
    Archetype(
        name="The Resonator",
        icon="🎵",
        condition=lambda p, ph, sm, mx: ph >= 75 and ph > sm + 10,
        description=(
            "Sound is your primary language of thought. Your phonological network is "
            "tightly wired: you hear words before you see them. Rhythm, rhyme, and "
            "syllable pattern are how your brain files language. You likely excel at "
            "names, lyrics, and spoken language."
        ),
    ),
    Archetype(
        name="The Mapper",
        icon="🗺️",
        condition=lambda p, ph, sm, mx: sm >= 75 and sm > ph + 10,
        description=(
            "Meaning is your anchor. You organise the world by concept, category, and "
            "context; words are nodes in a vast semantic web. You likely have strong "
            "reading comprehension and deep memory for ideas you find meaningful."
        ),
    ),
    Archetype(
        name="The Integrator",
        icon="⚗️",
        condition=lambda p, ph, sm, mx: mx >= 70,
        description=(
            "You excel where others struggle: tasks requiring both sound and meaning "
            "simultaneously. Your brain has built unusually strong bridges between "
            "phonological and semantic processing, the hallmark of expert language "
            "users and skilled writers."
        ),
    ),
    Archetype(
        name="The Navigator",
        icon="🧭",
        condition=lambda p, ph, sm, mx: p >= 60,
        description=(
            "You have solid, dependable word access across all three channels. You're "
            "rarely truly stuck; you find your way to words, even if not always "
            "instantly. With targeted practice on your weaker channel, the upper tier "
            "is very reachable."
        ),
    ),
    Archetype(
        name="The Explorer",
        icon="🏕️",
        condition=lambda p, ph, sm, mx: True,
        description=(
            "You're in an active phase of lexical network development. The pathways are "
            "there but not yet densely connected. This is a highly trainable state: "
            "semantic access improves faster than almost any other cognitive skill "
            "with the right practice."
        ),
    ),
)

ARCHETYPES_BY_NAME = MappingProxyType({a.name: a for a in ARCHETYPES})


def get_archetype(pct: int, phono: int, semantic: int, mixed: int,
                  archetypes: Sequence[Archetype] = ARCHETYPES) -> Archetype:
    """Return the first archetype whose condition holds."""
    for archetype in archetypes:
        if archetype.matches(pct, phono, semantic, mixed):
            return archetype
    return archetypes[-1]


# =============================================================================
# Aggregation
# =============================================================================

def _percent(total: float, rounds: int, ceiling: float) -> int:
    if rounds == 0:
        return 0
    return round_half_up((total / (rounds * ceiling)) * 100)


def channel_percentages(results: Iterable[RoundResult], policy=None) -> Mapping[Channel, int]:
    """Average score per channel as a percentage; channels without rounds are 0."""
    policy = policy or default_policy()
    totals = {c: 0.0 for c in CHANNEL_ORDER}
    counts = {c: 0 for c in CHANNEL_ORDER}
    for r in results:
        totals[r.type] += compute_round_score(r, policy)
        counts[r.type] += 1
    percentages = {}
    for c in CHANNEL_ORDER:
        avg = totals[c] / counts[c] if counts[c] else 0.0
        percentages[c] = round_half_up((avg / policy.max_score) * 100)
    return MappingProxyType(percentages)


def rank_channels(phono: int, semantic: int, mixed: int) -> List[ChannelScore]:
    """Channels by percentage, best first; ties keep phono, semantic, mixed order."""
    scores = [
        ChannelScore(channel, channel.label, pct)
        for channel, pct in zip(CHANNEL_ORDER, (phono, semantic, mixed))
    ]
    return sorted(scores, key=lambda s: -s.pct)


def generate_report(results: Sequence[RoundResult], age_bracket: str, policy=None) -> Report:
    """
    Build the end-of-session report.

    Pure and deterministic: identical inputs give identical reports. An
    empty result sequence gives 0 for every percentage.

    Args:
        results: Round results in play order
        age_bracket: Age bracket label (unknown labels use the default norm)
        policy: Scoring policy (defaults to app.yaml)

    Returns:
        Report
    """
    policy = policy or default_policy()
    results = tuple(results)

    total = sum(compute_round_score(r, policy) for r in results)
    pct = _percent(total, len(results), policy.max_score)

    by_channel = channel_percentages(results, policy)
    phono_pct = by_channel[Channel.PHONO]
    semantic_pct = by_channel[Channel.SEMANTIC]
    mixed_pct = by_channel[Channel.MIXED]

    bracket, norm = resolve_norm(age_bracket)
    percentile = percentile_for(pct, norm)
    archetype = get_archetype(pct, phono_pct, semantic_pct, mixed_pct)
    ranked = rank_channels(phono_pct, semantic_pct, mixed_pct)

    partial_types = tuple(r.type for r in results if r.partial)

    logger.debug(
        f"Report: {pct}% (p{percentile}) phono={phono_pct} semantic={semantic_pct} "
        f"mixed={mixed_pct} archetype={archetype.name}"
    )

    return Report(
        pct=pct,
        percentile=percentile,
        phono_pct=phono_pct,
        semantic_pct=semantic_pct,
        mixed_pct=mixed_pct,
        archetype=archetype,
        norm=norm,
        age_bracket=bracket,
        strongest=ranked[0],
        weakest=ranked[-1],
        partial_count=len(partial_types),
        partial_types=partial_types,
        results=results,
    )


__all__ = [
    'AGE_NORMS',
    'DEFAULT_BRACKET',
    'ARCHETYPES',
    'ARCHETYPES_BY_NAME',
    'Archetype',
    'round_half_up',
    'resolve_norm',
    'percentile_for',
    'get_archetype',
    'channel_percentages',
    'rank_channels',
    'generate_report',
]
