#!/usr/bin/env python3
"""
Phonetic Matching for Typed Answers
===================================

Decides whether a typed answer is the target word, a "sounds-like" near miss,
or wrong. The matcher is a small rule-based heuristic tuned to the quiz
vocabulary (uppercase A-Z English words), not a phonetic transcription.

Pipeline:
- Skeleton key: digraph folding, vowel-run collapsing, doubled-letter collapsing
- Cognate folding: voiced/unvoiced consonant pairs share one symbol
- Vowel-pattern guard: same vowel count, same lead vowel, >= half the
  vowel positions identical

Examples:
    >>> phonetic_key("Pepper")
    'PAPAR'
    >>> is_sounds_like("BARK", "PARK")
    True
    >>> is_sounds_like("PEPPER", "POPPER")
    False
"""

import re
from functools import lru_cache
from typing import Dict, Any

from lexaccess.models import MatchOutcome
from lexaccess.settings import require_setting

_CACHE_MAXSIZE = int(require_setting("phonetic.cache_maxsize"))

# Applied in order
_DIGRAPHS = (
    ("PH", "F"),
    ("CK", "K"),
    ("QU", "KW"),
    ("GH", ""),   # silent in light, night, though
)

# Voiced/unvoiced pairs. K/G stay apart: ANKLE and ANGLE are different words.
_COGNATES = str.maketrans({
    'D': 'T',
    'B': 'P',
    'V': 'F',
    'Z': 'S',
})

_VOWEL_RUN = re.compile(r'[AEIOU]+')
_REPEATED = re.compile(r'(.)\1+')
_NON_VOWEL = re.compile(r'[^AEIOU]')
_ONSET = re.compile(r'^[^AEIOU]*')


def _vowel_match_ratio() -> float:
    return float(require_setting("phonetic.vowel_match_ratio"))


def _min_skeleton_length() -> int:
    return int(require_setting("phonetic.min_skeleton_length"))


def _max_onset_length() -> int:
    return int(require_setting("phonetic.max_onset_length"))


# =============================================================================
# Normalizers
# =============================================================================

@lru_cache(maxsize=_CACHE_MAXSIZE)
def phonetic_key(word: str) -> str:
    """
    Reduce a word to its coarse sound skeleton.

    Steps (each works on the previous output):
    1. Upper-case
    2. Fold digraphs: PH->F, CK->K, QU->KW, GH->""
    3. Collapse every vowel run to a single A (only vowel position survives)
    4. Collapse runs of the same letter to one

    Examples:
        >>> phonetic_key("Flutter")
        'FLATAR'
        >>> phonetic_key("night")
        'NAT'
    """
    key = word.upper()
    for digraph, replacement in _DIGRAPHS:
        key = key.replace(digraph, replacement)
    key = _VOWEL_RUN.sub("A", key)
    return _REPEATED.sub(r"\1", key)


def normalize_phonetic(key: str) -> str:
    """Fold cognate consonants: T/D->T, P/B->P, F/V->F, S/Z->S."""
    return key.translate(_COGNATES)


def consonant_skeleton(key: str) -> str:
    """Cognate-normalized consonants of a skeleton key, vowels removed."""
    return normalize_phonetic(_VOWEL_RUN.sub("", key))


def onset(key: str) -> str:
    """Leading consonants of a skeleton key."""
    return _ONSET.match(key).group()


def rhyme_skeleton(key: str) -> str:
    """Consonant skeleton of a key after its onset (leading consonants)."""
    return consonant_skeleton(_ONSET.sub("", key, count=1))


def vowel_pattern(word: str) -> str:
    """Ordered vowels of a word, e.g. 'FLOWER' -> 'OE'."""
    return _NON_VOWEL.sub("", word.upper())


# =============================================================================
# Vowel Guard
# =============================================================================

def vowels_similar(word1: str, word2: str) -> bool:
    """
    Check whether two words have compatible vowel patterns.

    - Different vowel counts usually mean a different syllable count: False
    - The first vowel must match (PEPPER vs POPPER)
    - At least half of the vowel positions must match

    Words without any vowels are never similar; the match fraction is
    undefined for them.
    """
    v1 = vowel_pattern(word1)
    v2 = vowel_pattern(word2)
    if len(v1) != len(v2) or not v1:
        return False
    if v1[0] != v2[0]:
        return False
    matches = sum(1 for a, b in zip(v1, v2) if a == b)
    return matches / len(v1) >= _vowel_match_ratio()


def _lead_vowels_agree(word1: str, word2: str) -> bool:
    return vowel_pattern(word1)[:1] == vowel_pattern(word2)[:1]


# =============================================================================
# Sound Match
# =============================================================================

def _evaluate(guess: str, answer: str) -> Dict[str, Any]:
    """Run the decision sequence and report which step decided it."""
    gk = phonetic_key(guess)
    ak = phonetic_key(answer)
    floor = _min_skeleton_length()
    max_onset = _max_onset_length()

    detail: Dict[str, Any] = {
        'guess_key': gk,
        'answer_key': ak,
        'guess_normalized': normalize_phonetic(gk),
        'answer_normalized': normalize_phonetic(ak),
        'guess_consonants': consonant_skeleton(gk),
        'answer_consonants': consonant_skeleton(ak),
        'guess_rhyme': rhyme_skeleton(gk),
        'answer_rhyme': rhyme_skeleton(ak),
        'guess_vowels': vowel_pattern(guess),
        'answer_vowels': vowel_pattern(answer),
    }

    if gk == ak:
        detail['step'] = 'skeleton'
        detail['match'] = _lead_vowels_agree(guess, answer)
    elif detail['guess_normalized'] == detail['answer_normalized']:
        detail['step'] = 'cognates'
        detail['match'] = vowels_similar(guess, answer)
    elif (detail['guess_consonants'] == detail['answer_consonants']
          and len(detail['answer_consonants']) >= floor):
        detail['step'] = 'consonants'
        detail['match'] = vowels_similar(guess, answer)
    elif (detail['guess_rhyme'] == detail['answer_rhyme']
          and len(detail['answer_rhyme']) >= floor
          and len(onset(gk)) <= max_onset
          and len(onset(ak)) <= max_onset):
        detail['step'] = 'rhyme'
        detail['match'] = vowels_similar(guess, answer)
    else:
        detail['step'] = 'none'
        detail['match'] = False
    return detail


def is_sounds_like(guess: str, answer: str) -> bool:
    """
    Decide whether a guess sounds like the answer.

    Decision sequence (first applicable step decides):
    1. Identical skeleton keys: match when the lead vowels agree
    2. Identical cognate-normalized keys: vowel guard decides
    3. Identical consonant skeletons of length >= 2: vowel guard decides
    4. Identical rhyme skeletons (after an onset of at most one consonant)
       of length >= 2: vowel guard decides
    5. Otherwise no match

    Deterministic; no learned component.
    """
    return _evaluate(guess, answer)['match']


def explain_match(guess: str, answer: str) -> Dict[str, Any]:
    """Intermediate keys plus the deciding step for a guess/answer pair."""
    detail = _evaluate(guess, answer)
    detail['outcome'] = classify_guess(guess, answer).value
    return detail


def classify_guess(guess: str, answer: str) -> MatchOutcome:
    """Exact spelling -> CORRECT, sounds-like -> PARTIAL, else WRONG."""
    g = guess.strip().upper()
    a = answer.strip().upper()
    if g == a:
        return MatchOutcome.CORRECT
    if g and is_sounds_like(g, a):
        return MatchOutcome.PARTIAL
    return MatchOutcome.WRONG


__all__ = [
    'phonetic_key',
    'normalize_phonetic',
    'consonant_skeleton',
    'onset',
    'rhyme_skeleton',
    'vowel_pattern',
    'vowels_similar',
    'is_sounds_like',
    'explain_match',
    'classify_guess',
]


# =============================================================================
# CLI for Testing
# =============================================================================

if __name__ == '__main__':
    import sys

    if len(sys.argv) < 3:
        print("Usage: python -m lexaccess.phonetic_similarity <guess> <answer>")
        print("\nExample: python -m lexaccess.phonetic_similarity BARK PARK")
        sys.exit(1)

    info = explain_match(sys.argv[1], sys.argv[2])
    for k, v in info.items():
        print(f"  {k:<18} {v}")
