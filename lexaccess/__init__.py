#!/usr/bin/env python3
"""
LexAccess - Semantic Access Test
================================

A word-chain quiz that measures how quickly words are retrieved by sound
(phonological), by meaning (semantic) and by both at once (mixed), and
reports the result against age-bracket norms.

Quick Start
-----------
    from lexaccess import LexAccess

    lex = LexAccess()

    # Judge a typed answer
    lex.evaluate("PETTLE", "PETAL")       # MatchOutcome.PARTIAL

    # Run a session
    session = lex.new_session("30–44")
    session.start_test()
    ...
    lex.save(session.report)

Modules
-------
    lexaccess.phonetic_similarity - Skeleton keys and sounds-like matching
    lexaccess.scoring             - Per-round score
    lexaccess.report              - Report aggregation, norms, archetypes
    lexaccess.session             - Session driver (phases, reveals, timing)
    lexaccess.content             - Word chains and report text
    lexaccess.db                  - SQLite session history

CLI Usage
---------
    python -m lexaccess play --age 18-29
    python -m lexaccess match PETTLE PETAL -v
"""

__version__ = "0.2.0"
__author__ = "LexAccess"

from typing import Sequence

from .models import (
    LexAccessError,
    ContentError,
    SessionError,
    Channel,
    CHANNEL_ORDER,
    MatchOutcome,
    WordLink,
    RoundResult,
    AgeNorm,
    ChannelScore,
    Report,
)

from .phonetic_similarity import (
    phonetic_key,
    normalize_phonetic,
    vowels_similar,
    is_sounds_like,
    classify_guess,
    explain_match,
)

from .scoring import (
    ScoringPolicy,
    compute_round_score,
)

from .report import (
    AGE_NORMS,
    ARCHETYPES,
    Archetype,
    get_archetype,
    generate_report,
)

from .content import load_content
from .session import QuizSession, SessionPhase, RoundState
from .db import SessionDB, SessionRecord, get_db


class LexAccess:
    """
    Main interface tying content, scoring and history together.

    Examples
    --------
        >>> lex = LexAccess()
        >>> lex.evaluate("PARK", "BARK")
        <MatchOutcome.PARTIAL: 'partial'>
    """

    def __init__(self, db_path: str = None):
        self.content = load_content()
        self._db_path = db_path
        self._db = None  # Lazy: only opened when history is used

    @property
    def db(self) -> SessionDB:
        if self._db is None:
            self._db = SessionDB(self._db_path) if self._db_path else get_db()
        return self._db

    def evaluate(self, guess: str, answer: str) -> MatchOutcome:
        """Classify a guess as correct, a sounds-like near miss, or wrong."""
        return classify_guess(guess, answer)

    def new_session(self, age_bracket: str, **kwargs) -> QuizSession:
        """Create a session over the bundled chains."""
        kwargs.setdefault('chain', self.content.chain)
        kwargs.setdefault('practice_chain', self.content.practice_chain)
        return QuizSession(age_bracket=age_bracket, **kwargs)

    def report(self, results: Sequence[RoundResult], age_bracket: str) -> Report:
        return generate_report(results, age_bracket)

    def save(self, report: Report) -> int:
        """Store a report in the session history."""
        return self.db.save(report)

    def history(self, limit: int = 20):
        return self.db.recent(limit)


__all__ = [
    '__version__',
    'LexAccess',
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
    'phonetic_key',
    'normalize_phonetic',
    'vowels_similar',
    'is_sounds_like',
    'classify_guess',
    'explain_match',
    'ScoringPolicy',
    'compute_round_score',
    'AGE_NORMS',
    'ARCHETYPES',
    'Archetype',
    'get_archetype',
    'generate_report',
    'load_content',
    'QuizSession',
    'SessionPhase',
    'RoundState',
    'SessionDB',
    'SessionRecord',
    'get_db',
]
