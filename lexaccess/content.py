#!/usr/bin/env python3
"""
Quiz Content Loader
===================
Loads the static quiz content (word chains, channel metadata, report text)
from configs/content.yaml into read-only structures.

Usage:
    from lexaccess.content import load_content

    content = load_content()
    first = content.chain[0]
    tips = content.strategies[Channel.PHONO]
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from lexaccess.models import Channel, ContentError, WordLink
from lexaccess.settings import CONFIG_DIR

CONTENT_PATH = CONFIG_DIR / "content.yaml"

_WORD = re.compile(r'^[A-Z]+$')


@dataclass(frozen=True)
class ChannelMeta:
    label: str
    icon: str
    description: str


@dataclass(frozen=True)
class Strategy:
    """A practice tip for a channel."""
    title: str
    body: str


@dataclass(frozen=True)
class Note:
    label: str
    note: str


@dataclass(frozen=True)
class Content:
    """All static content, loaded once."""
    chain: Tuple[WordLink, ...]
    practice_chain: Tuple[WordLink, ...]
    channels: Mapping[Channel, ChannelMeta]
    strategies: Mapping[Channel, Tuple[Strategy, ...]]
    strengths: Mapping[Channel, str]
    weaknesses: Mapping[Channel, str]
    near_miss: str
    why_it_matters: Tuple[Note, ...]


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Content file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _parse_chain(entries: List[dict], section: str) -> Tuple[WordLink, ...]:
    """Parse and validate a word chain: A-Z words, linked answer -> prompt."""
    if not entries:
        raise ContentError(f"{section} is empty")

    links = []
    for i, entry in enumerate(entries):
        try:
            link = WordLink(
                type=Channel.parse(entry['type']),
                prompt=str(entry['prompt']).strip().upper(),
                answer=str(entry['answer']).strip().upper(),
                clue=str(entry['clue']).strip(),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ContentError(f"{section}[{i}] is malformed: {e}") from e

        for word in (link.prompt, link.answer):
            if not _WORD.match(word):
                raise ContentError(f"{section}[{i}]: '{word}' is not an A-Z word")
        if links and links[-1].answer != link.prompt:
            raise ContentError(
                f"{section}[{i}]: prompt '{link.prompt}' does not follow "
                f"previous answer '{links[-1].answer}'"
            )
        links.append(link)
    return tuple(links)


def _per_channel(raw: Dict[str, Any], section: str, convert) -> Mapping[Channel, Any]:
    data = raw.get(section) or {}
    if not isinstance(data, dict):
        raise ContentError(f"{section} must be a mapping of channels")
    result = {}
    for channel in Channel:
        if channel.value not in data:
            raise ContentError(f"{section}.{channel.value} is missing")
        try:
            result[channel] = convert(data[channel.value])
        except (KeyError, TypeError, AttributeError) as e:
            raise ContentError(f"{section}.{channel.value} is malformed: {e}") from e
    return MappingProxyType(result)


def _parse_notes(entries: List[dict]) -> Tuple[Note, ...]:
    notes = []
    for i, entry in enumerate(entries):
        try:
            notes.append(Note(label=str(entry['label']), note=str(entry['note'])))
        except (KeyError, TypeError) as e:
            raise ContentError(f"why_it_matters[{i}] is malformed: {e}") from e
    return tuple(notes)


def parse_content(raw: Dict[str, Any]) -> Content:
    """Build a Content object from the raw YAML mapping."""
    if not isinstance(raw, dict):
        raise ContentError("content must be a mapping")
    return Content(
        chain=_parse_chain(raw.get('chain'), 'chain'),
        practice_chain=_parse_chain(raw.get('practice_chain'), 'practice_chain'),
        channels=_per_channel(raw, 'channels', lambda m: ChannelMeta(
            label=m['label'], icon=m.get('icon', ''), description=m.get('description', ''),
        )),
        strategies=_per_channel(raw, 'strategies', lambda items: tuple(
            Strategy(title=s['title'], body=s['body']) for s in items
        )),
        strengths=_per_channel(raw, 'strengths', str),
        weaknesses=_per_channel(raw, 'weaknesses', str),
        near_miss=str(raw.get('near_miss', '')),
        why_it_matters=_parse_notes(raw.get('why_it_matters') or []),
    )


@lru_cache(maxsize=1)
def load_content() -> Content:
    """Load and validate configs/content.yaml."""
    return parse_content(_load_yaml(CONTENT_PATH))


def load_chain_file(path) -> Tuple[WordLink, ...]:
    """Load a custom chain from a YAML file containing a 'chain' list."""
    raw = _load_yaml(Path(path))
    if not isinstance(raw, dict):
        raise ContentError(f"{path}: expected a mapping with a 'chain' list")
    return _parse_chain(raw.get('chain'), 'chain')


__all__ = [
    'CONTENT_PATH',
    'ChannelMeta',
    'Strategy',
    'Note',
    'Content',
    'parse_content',
    'load_content',
    'load_chain_file',
]
