"""
Tests for Round Scoring
=======================
Tests penalties and per-round scores in lexaccess/scoring.py.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lexaccess.models import Channel, RoundResult
from lexaccess.scoring import (
    ScoringPolicy,
    default_policy,
    reveal_penalty,
    time_penalty,
    compute_round_score,
)


def _result(correct=True, partial=False, reveals=0, time_ms=0):
    return RoundResult(Channel.PHONO, correct, partial, reveals, time_ms)


class TestPolicy:
    """Tests for ScoringPolicy defaults."""

    def test_defaults_from_config(self):
        policy = default_policy()
        assert policy.max_score == 10
        assert policy.base_correct == 10
        assert policy.base_partial == 4
        assert policy.reveal_cost == 2.5
        assert policy.reveal_cap == 4

    def test_override(self):
        policy = ScoringPolicy(base_partial=5.0)
        assert policy.base_partial == 5.0
        assert policy.base_correct == 10

    def test_missing_settings(self, monkeypatch):
        """Missing scoring settings raise ValueError."""
        import lexaccess.scoring as scoring
        monkeypatch.setattr(scoring, "get_setting", lambda path, default=None: {})
        with pytest.raises(ValueError, match="scoring settings missing"):
            ScoringPolicy()


class TestPenalties:
    """Tests for reveal and time penalties."""

    def test_reveal_penalty(self):
        assert reveal_penalty(0) == 0
        assert reveal_penalty(1) == 2.5
        assert reveal_penalty(3) == 7.5

    def test_reveal_penalty_capped(self):
        assert reveal_penalty(4) == 10.0
        assert reveal_penalty(10) == 10.0

    def test_time_grace(self):
        assert time_penalty(0) == 0
        assert time_penalty(5000) == 0

    def test_time_mid(self):
        assert time_penalty(10000) == pytest.approx(1.5)
        assert time_penalty(15000) == pytest.approx(3.0)

    def test_time_late(self):
        assert time_penalty(20000) == pytest.approx(5.5)
        assert time_penalty(25000) == pytest.approx(8.0)

    def test_time_continuous_at_thresholds(self):
        assert time_penalty(5001) == pytest.approx(0.0003)
        assert time_penalty(15001) == pytest.approx(3.0005)


class TestComputeRoundScore:
    """Tests for compute_round_score."""

    def test_correct_fast(self):
        assert compute_round_score(_result(time_ms=5000)) == 10.0

    def test_partial_with_reveal(self):
        r = RoundResult(Channel.SEMANTIC, False, True, 1, 4000)
        assert compute_round_score(r) == pytest.approx(1.5)

    def test_unsolved_is_zero(self):
        """Unsolved rounds score 0 whatever the reveals and time."""
        assert compute_round_score(_result(correct=False)) == 0.0
        assert compute_round_score(_result(correct=False, reveals=5, time_ms=60000)) == 0.0

    def test_never_negative(self):
        assert compute_round_score(_result(reveals=3, time_ms=60000)) == 0.0
        assert compute_round_score(_result(correct=False, partial=True, reveals=2)) == 0.0

    def test_bounded(self):
        for reveals in range(0, 7):
            for time_ms in (0, 3000, 8000, 15000, 40000):
                for correct, partial in ((True, False), (False, True), (False, False)):
                    score = compute_round_score(_result(correct, partial, reveals, time_ms))
                    assert 0.0 <= score <= 10.0

    def test_monotonic_in_reveals(self):
        scores = [compute_round_score(_result(reveals=n, time_ms=2000)) for n in range(6)]
        assert scores == sorted(scores, reverse=True)

    def test_monotonic_in_time(self):
        times = [0, 4000, 6000, 12000, 15000, 18000, 30000]
        scores = [compute_round_score(_result(time_ms=t)) for t in times]
        assert scores == sorted(scores, reverse=True)

    def test_correct_beats_partial(self):
        assert compute_round_score(_result()) > compute_round_score(_result(correct=False, partial=True))

    def test_custom_policy(self):
        policy = ScoringPolicy(base_partial=5.0)
        r = _result(correct=False, partial=True)
        assert compute_round_score(r, policy) == 5.0
