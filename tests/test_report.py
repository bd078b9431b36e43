"""
Tests for Report Aggregation
============================
Tests percentages, norms, percentiles, archetypes and channel ranking in
lexaccess/report.py.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lexaccess.models import AgeNorm, Channel, RoundResult
from lexaccess.report import (
    AGE_NORMS,
    ARCHETYPES,
    DEFAULT_BRACKET,
    round_half_up,
    resolve_norm,
    percentile_for,
    get_archetype,
    channel_percentages,
    rank_channels,
    generate_report,
)


@pytest.fixture
def three_rounds():
    """Correct phono round, partial semantic round, failed mixed round."""
    return [
        RoundResult(Channel.PHONO, True, False, 0, 3000),
        RoundResult(Channel.SEMANTIC, False, True, 1, 4000),
        RoundResult(Channel.MIXED, False, False, 2, 30000),
    ]


class TestRounding:
    def test_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(4.5) == 5
        assert round_half_up(38.333) == 38
        assert round_half_up(0) == 0


class TestNorms:
    """Tests for age-bracket norms."""

    def test_table(self):
        assert AGE_NORMS["13–17"] == AgeNorm(55, 13)
        assert AGE_NORMS["18–29"] == AgeNorm(63, 11)
        assert AGE_NORMS["30–44"] == AgeNorm(61, 12)
        assert AGE_NORMS["45–59"] == AgeNorm(56, 13)
        assert AGE_NORMS["60+"] == AgeNorm(49, 14)

    def test_default_bracket(self):
        assert DEFAULT_BRACKET == "18–29"

    def test_ascii_hyphen(self):
        assert resolve_norm("30-44") == ("30–44", AgeNorm(61, 12))

    def test_unknown_falls_back(self):
        assert resolve_norm("99–120") == ("18–29", AgeNorm(63, 11))
        assert resolve_norm("") == ("18–29", AgeNorm(63, 11))


class TestPercentile:
    """Tests for the clamped linear percentile."""

    def test_at_mean(self):
        assert percentile_for(63, AgeNorm(63, 11)) == 50

    def test_one_sd(self):
        assert percentile_for(74, AgeNorm(63, 11)) == 70
        assert percentile_for(52, AgeNorm(63, 11)) == 30

    def test_clamped(self):
        assert percentile_for(100, AgeNorm(49, 14)) == 99
        assert percentile_for(0, AgeNorm(63, 11)) == 1


class TestArchetypes:
    """Tests for the ordered archetype rules."""

    def test_order_and_names(self):
        names = [a.name for a in ARCHETYPES]
        assert names == [
            "The Connector", "The Resonator", "The Mapper",
            "The Integrator", "The Navigator", "The Explorer",
        ]

    def test_last_always_matches(self):
        assert ARCHETYPES[-1].matches(0, 0, 0, 0)
        assert ARCHETYPES[-1].matches(100, 100, 100, 100)

    @pytest.mark.parametrize("scores,name", [
        ((85, 82, 80, 50), "The Connector"),
        ((85, 90, 60, 80), "The Resonator"),
        ((50, 40, 80, 10), "The Mapper"),
        ((50, 50, 50, 70), "The Integrator"),
        ((79, 80, 80, 80), "The Integrator"),
        ((60, 60, 60, 60), "The Navigator"),
        ((10, 10, 10, 10), "The Explorer"),
    ])
    def test_first_match_wins(self, scores, name):
        assert get_archetype(*scores).name == name


class TestChannels:
    """Tests for per-channel percentages and ranking."""

    def test_empty_channel_is_zero(self):
        results = [RoundResult(Channel.PHONO, True, False, 0, 0)]
        by_channel = channel_percentages(results)
        assert by_channel[Channel.PHONO] == 100
        assert by_channel[Channel.SEMANTIC] == 0
        assert by_channel[Channel.MIXED] == 0

    def test_rank_order(self):
        ranked = rank_channels(40, 90, 60)
        assert [s.channel for s in ranked] == [Channel.SEMANTIC, Channel.MIXED, Channel.PHONO]

    def test_ties_keep_declaration_order(self):
        ranked = rank_channels(50, 50, 50)
        assert [s.channel for s in ranked] == [Channel.PHONO, Channel.SEMANTIC, Channel.MIXED]


class TestGenerateReport:
    """Tests for generate_report."""

    def test_mixed_session(self, three_rounds):
        """Scores 10 + 1.5 + 0 over three rounds."""
        report = generate_report(three_rounds, "18–29")
        assert report.pct == 38
        assert report.phono_pct == 100
        assert report.semantic_pct == 15
        assert report.mixed_pct == 0
        assert report.percentile == 5
        assert report.archetype.name == "The Resonator"
        assert report.strongest.channel is Channel.PHONO
        assert report.weakest.channel is Channel.MIXED
        assert report.partial_count == 1
        assert report.partial_types == (Channel.SEMANTIC,)
        assert report.norm == AgeNorm(63, 11)
        assert report.results == tuple(three_rounds)

    def test_empty_session(self):
        report = generate_report([], "18–29")
        assert report.pct == 0
        assert (report.phono_pct, report.semantic_pct, report.mixed_pct) == (0, 0, 0)
        assert report.percentile == 1
        assert report.archetype.name == "The Explorer"
        assert report.strongest.channel is Channel.PHONO
        assert report.weakest.channel is Channel.MIXED
        assert report.partial_count == 0

    def test_perfect_session(self):
        channels = [Channel.PHONO, Channel.SEMANTIC, Channel.MIXED] * 7
        results = [RoundResult(c, True, False, 0, 1000) for c in channels[:20]]
        report = generate_report(results, "60+")
        assert report.pct == 100
        assert report.percentile == 99
        assert report.archetype.name == "The Connector"

    def test_unknown_bracket_uses_default(self, three_rounds):
        report = generate_report(three_rounds, "unknown")
        assert report.age_bracket == "18–29"
        assert report.norm == AgeNorm(63, 11)

    def test_hyphen_bracket(self, three_rounds):
        report = generate_report(three_rounds, "30-44")
        assert report.age_bracket == "30–44"
        assert report.norm == AgeNorm(61, 12)

    def test_deterministic(self, three_rounds):
        assert generate_report(three_rounds, "45–59") == generate_report(three_rounds, "45–59")

    def test_percentages_bounded(self):
        results = []
        for i in range(12):
            channel = (Channel.PHONO, Channel.SEMANTIC, Channel.MIXED)[i % 3]
            results.append(RoundResult(channel, i % 2 == 0, i % 4 == 1, i % 5, i * 2500))
            report = generate_report(results, "18–29")
            for pct in (report.pct, report.phono_pct, report.semantic_pct, report.mixed_pct):
                assert 0 <= pct <= 100
            assert 1 <= report.percentile <= 99

    def test_to_dict(self, three_rounds):
        data = generate_report(three_rounds, "18–29").to_dict()
        assert data['pct'] == 38
        assert data['archetype'] == "The Resonator"
        assert data['strongest'] == {'key': 'phono', 'label': 'Phonological', 'pct': 100}
        assert data['partial_types'] == ['semantic']
        assert len(data['results']) == 3
