"""
Tests for Quiz Content
======================
Tests loading and validation of word chains and report text in
lexaccess/content.py.
"""

import pytest
import sys
import copy
from pathlib import Path

import yaml

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lexaccess.content import CONTENT_PATH, load_content, load_chain_file, parse_content
from lexaccess.models import Channel, ContentError


@pytest.fixture
def raw():
    """Fresh copy of the bundled content mapping."""
    with open(CONTENT_PATH, 'r', encoding='utf-8') as f:
        return copy.deepcopy(yaml.safe_load(f))


class TestBundledContent:
    """Tests for configs/content.yaml."""

    def test_chain(self):
        content = load_content()
        assert len(content.chain) == 20
        assert content.chain[0].prompt == "BUTTER"
        assert content.chain[0].answer == "FLUTTER"
        assert content.chain[-1].answer == "STALE"

    def test_chain_is_linked(self):
        chain = load_content().chain
        for prev, link in zip(chain, chain[1:]):
            assert link.prompt == prev.answer

    def test_channel_mix(self):
        types = [link.type for link in load_content().chain]
        assert types.count(Channel.PHONO) == 9
        assert types.count(Channel.SEMANTIC) == 8
        assert types.count(Channel.MIXED) == 3

    def test_practice_chain(self):
        practice = load_content().practice_chain
        assert [link.answer for link in practice] == ["LIGHT", "DARK", "PARK"]

    def test_per_channel_text(self):
        content = load_content()
        for channel in Channel:
            assert content.channels[channel].label == channel.label
            assert len(content.strategies[channel]) == 3
            assert content.strengths[channel]
            assert content.weaknesses[channel]
        assert content.near_miss
        assert content.why_it_matters

    def test_cached(self):
        assert load_content() is load_content()


class TestValidation:
    """Tests for content errors."""

    def test_non_letter_word(self, raw):
        raw['chain'][0]['answer'] = "FLUTT3R"
        with pytest.raises(ContentError, match="not an A-Z word"):
            parse_content(raw)

    def test_broken_link(self, raw):
        raw['chain'][1]['prompt'] = "BUTTER"
        with pytest.raises(ContentError, match="does not follow"):
            parse_content(raw)

    def test_unknown_channel(self, raw):
        raw['chain'][0]['type'] = "visual"
        with pytest.raises(ContentError):
            parse_content(raw)

    def test_missing_field(self, raw):
        del raw['chain'][0]['clue']
        with pytest.raises(ContentError):
            parse_content(raw)

    def test_empty_chain(self, raw):
        raw['practice_chain'] = []
        with pytest.raises(ContentError):
            parse_content(raw)

    def test_missing_channel_text(self, raw):
        del raw['strengths']['mixed']
        with pytest.raises(ContentError, match="strengths.mixed"):
            parse_content(raw)

    def test_lowercase_words_normalized(self, raw):
        raw['chain'] = [{'type': 'phono', 'prompt': 'night', 'answer': 'light', 'clue': 'x'}]
        content = parse_content(raw)
        assert content.chain[0].answer == "LIGHT"


class TestChainFile:
    """Tests for custom chain files."""

    def test_load(self, tmp_path):
        path = tmp_path / "chain.yaml"
        path.write_text(
            "chain:\n"
            "  - {type: phono, prompt: CAT, answer: HAT, clue: Worn on the head}\n"
            "  - {type: semantic, prompt: HAT, answer: CAP, clue: A brimmed one}\n",
            encoding='utf-8',
        )
        chain = load_chain_file(path)
        assert [link.answer for link in chain] == ["HAT", "CAP"]
        assert chain[1].type is Channel.SEMANTIC

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_chain_file(tmp_path / "nope.yaml")


class TestMalformedSections:
    """Malformed sections raise ContentError instead of raw lookup errors."""

    def test_not_a_mapping(self):
        with pytest.raises(ContentError):
            parse_content(["chain"])

    def test_channel_section_is_a_list(self, raw):
        raw['channels'] = ['phono', 'semantic', 'mixed']
        with pytest.raises(ContentError, match="channels"):
            parse_content(raw)

    def test_channel_entry_is_a_list(self, raw):
        raw['channels']['phono'] = ['Phonological']
        with pytest.raises(ContentError, match="channels.phono"):
            parse_content(raw)

    def test_strategy_without_body(self, raw):
        del raw['strategies']['semantic'][0]['body']
        with pytest.raises(ContentError, match="strategies.semantic"):
            parse_content(raw)

    def test_note_without_text(self, raw):
        del raw['why_it_matters'][1]['note']
        with pytest.raises(ContentError, match=r"why_it_matters\[1\]"):
            parse_content(raw)

    def test_chain_file_not_a_mapping(self, tmp_path):
        path = tmp_path / "chain.yaml"
        path.write_text("- CAT\n- HAT\n", encoding='utf-8')
        with pytest.raises(ContentError):
            load_chain_file(path)
