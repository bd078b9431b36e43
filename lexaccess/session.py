#!/usr/bin/env python3
"""
Quiz Session Driver
===================
Owns the mutable state of a test run: phase sequencing, the current round,
letter reveals, timing and the list of finished rounds. The scoring engine
itself stays pure; this module only feeds it finished RoundResults.

Phases:
    WELCOME -> PRACTICE -> PRACTICE_COMPLETE -> PLAYING -> REPORT

Usage:
    session = QuizSession(age_bracket="18–29")
    session.start_practice()            # optional
    ...
    session.start_test()
    while session.phase is SessionPhase.PLAYING:
        outcome = session.submit("UTTER")     # letters after the revealed prefix
        if outcome in (MatchOutcome.CORRECT, MatchOutcome.PARTIAL):
            session.advance()
    report = session.report
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from lexaccess.content import load_content
from lexaccess.models import MatchOutcome, Report, RoundResult, SessionError, WordLink
from lexaccess.phonetic_similarity import classify_guess
from lexaccess.report import generate_report
from lexaccess.settings import get_setting

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    WELCOME = "welcome"
    PRACTICE = "practice"
    PRACTICE_COMPLETE = "practice-complete"
    PLAYING = "playing"
    REPORT = "report"


@dataclass
class RoundState:
    """
    Mutable state of the round in progress.

    `revealed` counts letters shown from the start of the answer, of which
    the first `free_letters` cost nothing; `guess` holds only the letters
    typed after them.
    """
    link: WordLink
    started_at: float
    revealed: int = 1
    free_letters: int = 1
    guess: str = ""
    guess_count: int = 0
    feedback: Optional[MatchOutcome] = None

    @property
    def answer(self) -> str:
        return self.link.answer

    @property
    def remaining(self) -> int:
        """Letters the player still has to type."""
        return len(self.answer) - self.revealed

    @property
    def paid_reveals(self) -> int:
        """Letters revealed on request, beyond the free ones."""
        return max(0, self.revealed - self.free_letters)

    @property
    def revealed_prefix(self) -> str:
        return self.answer[:self.revealed]

    @property
    def finished(self) -> bool:
        return self.feedback in (MatchOutcome.CORRECT, MatchOutcome.PARTIAL)

    def elapsed_ms(self, now: float) -> int:
        return max(0, int(round((now - self.started_at) * 1000)))

    def masked(self, placeholder: str = "_") -> str:
        """Answer with unrevealed letters hidden, typed letters filled in."""
        cells = []
        for i, letter in enumerate(self.answer):
            if i < self.revealed or self.finished:
                cells.append(letter)
            elif i - self.revealed < len(self.guess):
                cells.append(self.guess[i - self.revealed])
            else:
                cells.append(placeholder)
        return " ".join(cells)


class QuizSession:
    """
    Drives one run of the test.

    Args:
        age_bracket: Age bracket used for the final report
        chain: Word chain for the real test (default: content.yaml)
        practice_chain: Chain for practice rounds (default: content.yaml)
        clock: Seconds-returning clock, injectable for tests
        practice_rounds: Practice rounds to play (default: app.yaml)
        initial_reveal: Letters shown free at the start of a round (default: app.yaml)
    """

    def __init__(self,
                 age_bracket: str,
                 chain: Sequence[WordLink] = None,
                 practice_chain: Sequence[WordLink] = None,
                 clock: Callable[[], float] = time.monotonic,
                 practice_rounds: int = None,
                 initial_reveal: int = None):
        if chain is None or practice_chain is None:
            content = load_content()
            chain = content.chain if chain is None else chain
            practice_chain = content.practice_chain if practice_chain is None else practice_chain

        if not chain:
            raise SessionError("chain must contain at least one round")

        self.age_bracket = age_bracket
        self.chain: Tuple[WordLink, ...] = tuple(chain)
        self.practice_chain: Tuple[WordLink, ...] = tuple(practice_chain)
        self.clock = clock

        if practice_rounds is None:
            practice_rounds = get_setting("session.practice_rounds", 3)
        self.practice_rounds = min(int(practice_rounds), len(self.practice_chain))
        if initial_reveal is None:
            initial_reveal = get_setting("session.initial_reveal", 1)
        self.initial_reveal = max(0, int(initial_reveal))

        self.phase = SessionPhase.WELCOME
        self.round_index = 0
        self.current: Optional[RoundState] = None
        self.report: Optional[Report] = None
        self._results: List[RoundResult] = []

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_practice(self) -> bool:
        return self.phase is SessionPhase.PRACTICE

    @property
    def active_chain(self) -> Tuple[WordLink, ...]:
        return self.practice_chain if self.is_practice else self.chain

    @property
    def total_rounds(self) -> int:
        return self.practice_rounds if self.is_practice else len(self.chain)

    @property
    def results(self) -> Tuple[RoundResult, ...]:
        return tuple(self._results)

    @property
    def progress(self) -> float:
        """Fraction of rounds completed in the current phase."""
        if not self.total_rounds:
            return 0.0
        return self.round_index / self.total_rounds

    # =========================================================================
    # Phase transitions
    # =========================================================================

    def start_practice(self) -> None:
        if self.phase is not SessionPhase.WELCOME:
            raise SessionError(f"cannot start practice from {self.phase.value}")
        if not self.practice_rounds:
            raise SessionError("no practice rounds configured")
        self._begin(SessionPhase.PRACTICE)

    def start_test(self) -> None:
        if self.phase not in (SessionPhase.WELCOME, SessionPhase.PRACTICE_COMPLETE):
            raise SessionError(f"cannot start the test from {self.phase.value}")
        self._begin(SessionPhase.PLAYING)

    def _begin(self, phase: SessionPhase) -> None:
        self.phase = phase
        self.round_index = 0
        self._results = []
        self._start_round()
        logger.info(f"Started {phase.value} ({self.total_rounds} rounds)")

    def _start_round(self) -> None:
        link = self.active_chain[self.round_index]
        free = min(self.initial_reveal, len(link.answer))
        self.current = RoundState(
            link=link,
            started_at=self.clock(),
            revealed=free,
            free_letters=free,
        )

    def advance(self) -> None:
        """Move past a finished round, or finish the phase after the last one."""
        state = self._require_round()
        if not state.finished:
            raise SessionError("round not finished; submit or skip first")
        self._next_round()

    def _next_round(self) -> None:
        nxt = self.round_index + 1

        if self.is_practice and nxt >= self.total_rounds:
            self.phase = SessionPhase.PRACTICE_COMPLETE
            self.current = None
            logger.info("Practice complete")
            return

        if self.phase is SessionPhase.PLAYING and nxt >= len(self.chain):
            self.report = generate_report(self._results, self.age_bracket)
            self.phase = SessionPhase.REPORT
            self.current = None
            logger.info(f"Test complete: {self.report.pct}% ({self.report.archetype.name})")
            return

        self.round_index = nxt
        self._start_round()

    # =========================================================================
    # Round actions
    # =========================================================================

    def _require_round(self) -> RoundState:
        if self.phase not in (SessionPhase.PRACTICE, SessionPhase.PLAYING) or self.current is None:
            raise SessionError(f"no round in progress (phase: {self.phase.value})")
        return self.current

    def _require_open_round(self) -> RoundState:
        state = self._require_round()
        if state.finished:
            raise SessionError("round already finished; call advance()")
        return state

    def type_guess(self, text: str) -> bool:
        """
        Replace the in-progress guess.

        Returns False (and keeps the previous guess) when the text is longer
        than the number of hidden letters.
        """
        state = self._require_open_round()
        value = (text or "").strip().upper()
        if len(value) > state.remaining:
            return False
        state.guess = value
        return True

    def submit(self, text: str = None) -> Optional[MatchOutcome]:
        """
        Submit the in-progress guess (or `text`, if given).

        The revealed prefix is prepended before matching. Returns None for an
        empty guess; WRONG leaves the round open.
        """
        state = self._require_open_round()
        if text is not None:
            value = text.strip().upper()
        else:
            value = state.guess
        if not value:
            return None

        state.guess_count += 1
        state.guess = ""
        full_guess = state.revealed_prefix + value

        if len(value) > state.remaining:
            outcome = MatchOutcome.WRONG
        else:
            outcome = classify_guess(full_guess, state.answer)
        state.feedback = outcome

        if outcome is MatchOutcome.WRONG:
            logger.debug(f"Round {self.round_index + 1}: '{full_guess}' is wrong")
            return outcome

        result = RoundResult(
            type=state.link.type,
            correct=outcome is MatchOutcome.CORRECT,
            partial=outcome is MatchOutcome.PARTIAL,
            reveals=state.paid_reveals,
            time_ms=state.elapsed_ms(self.clock()),
            guesses=state.guess_count,
            partial_guess=full_guess if outcome is MatchOutcome.PARTIAL else None,
            answer=state.answer,
        )
        self._record(result)
        return outcome

    def reveal_next(self) -> bool:
        """
        Reveal one more letter.

        The first typed letter is dropped since it now sits under the revealed
        prefix. Returns False once the whole word is shown.
        """
        state = self._require_open_round()
        if state.revealed >= len(state.answer):
            return False
        state.revealed += 1
        state.guess = state.guess[1:]
        state.feedback = None
        return True

    def skip(self) -> RoundResult:
        """Give up on the round; records every shown letter as a reveal."""
        state = self._require_open_round()
        result = RoundResult(
            type=state.link.type,
            correct=False,
            partial=False,
            reveals=state.revealed,
            time_ms=state.elapsed_ms(self.clock()),
            guesses=state.guess_count,
            partial_guess=None,
            answer=state.answer,
        )
        self._record(result)
        self._next_round()
        return result

    def _record(self, result: RoundResult) -> None:
        self._results.append(result)
        logger.info(
            f"Round {self.round_index + 1}/{self.total_rounds} "
            f"[{result.type.value}] {result.outcome.value} "
            f"reveals={result.reveals} time={result.time_ms}ms"
        )


__all__ = [
    'SessionPhase',
    'RoundState',
    'QuizSession',
]
