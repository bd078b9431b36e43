#!/usr/bin/env python3
"""
Round Scoring
=============
Converts one finished round into a 0-10 score.

    score = max(0, base - reveal_penalty - time_penalty)

- base: 10 for an exact answer, 4 for a sounds-like near miss, and the
  round scores 0 outright when it was neither
- reveal_penalty: 2.5 per revealed letter, capped at 4 letters
- time_penalty: free for 5s, 0.3/s up to 15s, then 3 + 0.5/s

Inputs are not validated; the session driver produces well-formed results.
"""

from dataclasses import dataclass
from typing import Optional

from lexaccess.models import RoundResult
from lexaccess.settings import get_setting


@dataclass
class ScoringPolicy:
    """Scoring constants (defaults come from the scoring section of app.yaml)."""
    max_score: Optional[float] = None
    base_correct: Optional[float] = None
    base_partial: Optional[float] = None
    reveal_cost: Optional[float] = None
    reveal_cap: Optional[int] = None
    grace_seconds: Optional[float] = None   # No time penalty up to here
    mid_seconds: Optional[float] = None     # Slope changes here
    mid_rate: Optional[float] = None
    late_rate: Optional[float] = None

    def __post_init__(self):
        cfg = get_setting("scoring", {}) or {}
        missing = []
        for name in self.__dataclass_fields__:
            if getattr(self, name) is None:
                value = cfg.get(name)
                if value is None:
                    missing.append(name)
                setattr(self, name, value)
        if missing:
            raise ValueError(f"scoring settings missing in app.yaml: {', '.join(missing)}")


_default_policy = None

def default_policy() -> ScoringPolicy:
    global _default_policy
    if _default_policy is None:
        _default_policy = ScoringPolicy()
    return _default_policy


def reveal_penalty(reveals: int, policy: ScoringPolicy = None) -> float:
    policy = policy or default_policy()
    return min(reveals, policy.reveal_cap) * policy.reveal_cost


def time_penalty(time_ms: float, policy: ScoringPolicy = None) -> float:
    """Penalty for elapsed time; steeper past the mid threshold."""
    policy = policy or default_policy()
    secs = time_ms / 1000
    if secs <= policy.grace_seconds:
        return 0.0
    if secs <= policy.mid_seconds:
        return (secs - policy.grace_seconds) * policy.mid_rate
    mid_total = (policy.mid_seconds - policy.grace_seconds) * policy.mid_rate
    return mid_total + (secs - policy.mid_seconds) * policy.late_rate


def compute_round_score(result: RoundResult, policy: ScoringPolicy = None) -> float:
    """
    Score a finished round in [0, 10].

    Unsolved rounds score exactly 0 whatever their time and reveals.

    Examples:
        >>> compute_round_score(RoundResult(Channel.PHONO, True, False, 0, 2000))
        10.0
        >>> compute_round_score(RoundResult(Channel.SEMANTIC, False, True, 1, 4000))
        1.5
    """
    policy = policy or default_policy()
    if not result.correct and not result.partial:
        return 0.0
    base = policy.base_partial if result.partial else policy.base_correct
    score = base - reveal_penalty(result.reveals, policy) - time_penalty(result.time_ms, policy)
    return float(max(0.0, score))


__all__ = [
    'ScoringPolicy',
    'default_policy',
    'reveal_penalty',
    'time_penalty',
    'compute_round_score',
]
