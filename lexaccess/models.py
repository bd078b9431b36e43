#!/usr/bin/env python3
"""
Data Model
==========
Records exchanged between the session driver, the scoring engine and the
report stage:

- Channel:      retrieval mode tested by a round (phono / semantic / mixed)
- WordLink:     one static chain entry (prompt, answer, clue)
- RoundResult:  outcome of a finished round, immutable once created
- AgeNorm:      mean/sd of the overall score for an age bracket
- ChannelScore: a channel percentage used for strongest/weakest
- Report:       the derived end-of-session report
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, List, Any


class LexAccessError(Exception):
    """Base class for LexAccess errors."""


class ContentError(LexAccessError):
    """Static content is malformed."""


class SessionError(LexAccessError):
    """A session operation is not valid in the current phase."""


class Channel(Enum):
    """Retrieval channel of a round"""
    PHONO = "phono"          # Sounds like the prompt
    SEMANTIC = "semantic"    # Means something related
    MIXED = "mixed"          # Both at once

    @property
    def label(self) -> str:
        return _CHANNEL_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Channel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown channel: {value!r}") from None


_CHANNEL_LABELS = {
    Channel.PHONO: "Phonological",
    Channel.SEMANTIC: "Semantic",
    Channel.MIXED: "Mixed",
}

CHANNEL_ORDER: Tuple[Channel, ...] = (Channel.PHONO, Channel.SEMANTIC, Channel.MIXED)


class MatchOutcome(Enum):
    """Verdict for a submitted guess"""
    CORRECT = "correct"
    PARTIAL = "partial"
    WRONG = "wrong"


@dataclass(frozen=True)
class WordLink:
    """A single link of a word chain."""
    type: Channel
    prompt: str
    answer: str
    clue: str


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one finished round."""
    type: Channel
    correct: bool
    partial: bool
    reveals: int
    time_ms: int
    guesses: int = 1
    partial_guess: Optional[str] = None
    answer: Optional[str] = None   # Target word, when known

    @property
    def outcome(self) -> MatchOutcome:
        if self.correct:
            return MatchOutcome.CORRECT
        if self.partial:
            return MatchOutcome.PARTIAL
        return MatchOutcome.WRONG

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'correct': self.correct,
            'partial': self.partial,
            'reveals': self.reveals,
            'time_ms': self.time_ms,
            'guesses': self.guesses,
            'partial_guess': self.partial_guess,
            'answer': self.answer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RoundResult":
        """Build from a dict; accepts snake_case or camelCase keys."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data:
                    return data[key]
            return default

        return cls(
            type=Channel.parse(data['type']),
            correct=bool(pick('correct', default=False)),
            partial=bool(pick('partial', default=False)),
            reveals=int(pick('reveals', default=0)),
            time_ms=int(pick('time_ms', 'timeMs', default=0)),
            guesses=int(pick('guesses', default=1)),
            partial_guess=pick('partial_guess', 'partialGuess'),
            answer=pick('answer'),
        )


@dataclass(frozen=True)
class AgeNorm:
    """Normative overall score for an age bracket"""
    mean: float
    sd: float

    def to_dict(self) -> dict:
        return {'mean': self.mean, 'sd': self.sd}


@dataclass(frozen=True)
class ChannelScore:
    channel: Channel
    label: str
    pct: int

    def to_dict(self) -> dict:
        return {'key': self.channel.value, 'label': self.label, 'pct': self.pct}


@dataclass(frozen=True)
class Report:
    """
    End-of-session report.

    Computed once from the complete round sequence and an age bracket;
    never updated afterwards.
    """
    pct: int
    percentile: int
    phono_pct: int
    semantic_pct: int
    mixed_pct: int
    archetype: Any  # report.Archetype
    norm: AgeNorm
    age_bracket: str
    strongest: ChannelScore
    weakest: ChannelScore
    partial_count: int
    partial_types: Tuple[Channel, ...]
    results: Tuple[RoundResult, ...] = field(default_factory=tuple)

    @property
    def channel_scores(self) -> List[ChannelScore]:
        pcts = (self.phono_pct, self.semantic_pct, self.mixed_pct)
        return [ChannelScore(c, c.label, p) for c, p in zip(CHANNEL_ORDER, pcts)]

    def to_dict(self) -> dict:
        return {
            'pct': self.pct,
            'percentile': self.percentile,
            'phono_pct': self.phono_pct,
            'semantic_pct': self.semantic_pct,
            'mixed_pct': self.mixed_pct,
            'archetype': self.archetype.name,
            'norm': self.norm.to_dict(),
            'age_bracket': self.age_bracket,
            'strongest': self.strongest.to_dict(),
            'weakest': self.weakest.to_dict(),
            'partial_count': self.partial_count,
            'partial_types': [c.value for c in self.partial_types],
            'results': [r.to_dict() for r in self.results],
        }


__all__ = [
    'LexAccessError',
    'ContentError',
    'SessionError',
    'Channel',
    'CHANNEL_ORDER',
    'MatchOutcome',
    'WordLink',
    'RoundResult',
    'AgeNorm',
    'ChannelScore',
    'Report',
]
