"""
Tests for the lemmatizer, segmenter and gloss sequence builder.
"""

import pytest

from islgloss.translator.lemmatizer import lemmatize
from islgloss.translator.lexicon import (
    AVAILABLE_WORDS, DEFAULT_LEXICON, SENTENCE_SUBSTITUTIONS, Lexicon, build_alias_map,
)
from islgloss.translator.segmenter import MatchSource, Segmenter, Token, TokenKind
from islgloss.translator.sequence import build_sequence


class TestLemmatizer:

    @pytest.mark.parametrize('word,expected', [
        ('cities', 'city'),
        ('wolves', 'wolf'),
        ('dreaming', 'dream'),
        ('dreamed', 'dream'),
        ('loudest', 'loud'),
        ('louder', 'loud'),
        ('chairs', 'chair'),
        ('Tables', 'table'),
    ])
    def test_suffix_rules(self, word, expected):
        assert lemmatize(word) == expected

    def test_overrides_win_over_rules(self):
        assert lemmatize('better') == 'good'
        assert lemmatize('happier') == 'happy'
        assert lemmatize('Children') == 'child'

    def test_double_s_words_keep_their_s(self):
        assert lemmatize('dress') == 'dress'
        assert lemmatize('glass') == 'glass'

    def test_short_words_are_left_alone(self):
        # Too short for any rule's minimum length
        assert lemmatize('bed') == 'bed'
        assert lemmatize('red') == 'red'
        assert lemmatize('is') == 'is'

    def test_unmatched_word_is_lowercased(self):
        assert lemmatize('Monday') == 'monday'
        assert lemmatize('') == ''

    def test_idempotent_over_vocabulary_stems(self):
        words = {w for phrase in AVAILABLE_WORDS for w in phrase.split()}
        for word in words:
            stem = lemmatize(word)
            assert lemmatize(stem) == stem, word


class TestAliasMap:

    def test_canonical_maps_to_itself(self):
        alias_map = build_alias_map({'computer': [' PC ', 'laptop', '']})
        assert alias_map == {'computer': 'computer', 'pc': 'computer', 'laptop': 'computer'}

    def test_default_lexicon_aliases(self):
        assert DEFAULT_LEXICON.alias_target('mobile phone') == 'cell phone'
        assert DEFAULT_LEXICON.alias_target('hat') == 'hat'
        assert DEFAULT_LEXICON.alias_target('spaceship') is None


class TestSegmenter:

    def setup_method(self):
        self.segmenter = Segmenter()

    def test_split_words_cleans_punctuation(self):
        words = self.segmenter.split_words('  Good-morning, "friend"!  how/are you?? ')
        assert words == ['Good', 'morning', 'friend', 'how', 'are', 'you']

    def test_sentence_substitution(self):
        sentence = next(k for k, v in SENTENCE_SUBSTITUTIONS.items() if v == 'shirt suit')
        assert self.segmenter.split_words(f'  {sentence} ') == ['shirt', 'suit']

    def test_today_i_am_happy(self):
        tokens = self.segmenter.segment('today I am happy')
        assert [(t.original, t.canonical, t.source) for t in tokens] == [
            ('today', 'today', MatchSource.EXACT),
            ('happy', 'happy', MatchSource.EXACT),
        ]
        assert build_sequence(tokens) == ['today', 'happy']

    def test_longest_match_wins(self):
        tokens = self.segmenter.segment('good morning morning')
        assert tokens[0].kind == TokenKind.MATCHED
        assert tokens[0].canonical == 'good morning'
        assert tokens[0].span == (0, 2)
        assert len(tokens) == 2
        assert tokens[1].kind == TokenKind.RAW
        assert tokens[1].original == 'morning'

    def test_multi_word_alias(self):
        tokens = self.segmenter.segment('my mobile phone')
        assert len(tokens) == 1
        assert tokens[0].canonical == 'cell phone'
        assert tokens[0].source == MatchSource.ALIAS
        assert tokens[0].original == 'mobile phone'

    def test_lemma_match(self):
        tokens = self.segmenter.segment('two chairs')
        chair = tokens[-1]
        assert chair.canonical == 'chair'
        assert chair.source == MatchSource.LEMMA
        assert chair.original == 'chairs'

    def test_lemma_alias_match(self):
        tokens = self.segmenter.segment('laptops')
        assert tokens[0].canonical == 'computer'
        assert tokens[0].source == MatchSource.ALIAS

    def test_raw_token_detail(self):
        tokens = self.segmenter.segment('Spaceships')
        raw = tokens[0]
        assert raw.kind == TokenKind.RAW
        assert raw.canonical is None
        assert raw.normalized == 'spaceships'
        assert raw.lemma == 'spaceship'
        assert raw.accepted is False

    def test_function_words_dropped(self):
        assert self.segmenter.segment('the is am to of') == []

    @pytest.mark.parametrize('sentence', [
        'today I am happy',
        'the pc is loud',
        'good morning how are you my friend',
        'I sat on a chair near the window on Monday',
        'hard of hearing people like loud fans',
    ])
    def test_spans_cover_input(self, sentence):
        words = self.segmenter.split_words(sentence)
        tokens = self.segmenter.segment_words(words)

        covered = []
        for token in tokens:
            start, end = token.span
            assert token.original == ' '.join(words[start:end])
            covered.extend(range(start, end))
        assert covered == sorted(set(covered))

        dropped = [i for i in range(len(words)) if i not in covered]
        for i in dropped:
            assert DEFAULT_LEXICON.is_function_word(words[i].lower())

    def test_canonical_always_in_vocabulary(self):
        tokens = self.segmenter.segment('pretty gown and tuxedo on sat with a smartphone')
        for token in tokens:
            if token.canonical is not None:
                assert DEFAULT_LEXICON.is_vocabulary(token.canonical)

    def test_custom_lexicon(self):
        lexicon = Lexicon(vocabulary=['red', 'red car'], aliases={'red car': ['automobile']})
        tokens = Segmenter(lexicon).segment('red automobile red car')
        assert [t.canonical for t in tokens] == ['red', 'red car', 'red car']


class TestBuildSequence:

    def _tokens(self, sentence):
        return Segmenter().segment(sentence)

    def test_time_words_first_stable(self):
        assert build_sequence(self._tokens('hat monday shirt')) == ['monday', 'hat', 'shirt']
        assert build_sequence(self._tokens('hat friday shirt today')) == ['friday', 'today', 'hat', 'shirt']

    def test_raw_tokens_follow_fingerspelling_toggle(self):
        tokens = self._tokens('hat zebra')
        assert build_sequence(tokens, fingerspelling_enabled=True) == ['hat', 'zebra']
        assert build_sequence(tokens, fingerspelling_enabled=False) == ['hat']

    def test_raw_time_word_keeps_its_place(self):
        tokens = self._tokens('hat tomorrow monday')
        assert tokens[1].kind == TokenKind.RAW
        assert build_sequence(tokens) == ['monday', 'hat', 'tomorrow']

    def test_toggling_accepted(self):
        semantic = Token(
            kind=TokenKind.RAW, original='laptop', span=(1, 2), normalized='laptop', lemma='laptop',
        ).as_semantic_match('computer', 0.91)
        tokens = self._tokens('hat') + [semantic]

        assert build_sequence(tokens, fingerspelling_enabled=False) == ['hat', 'computer']
        semantic.accepted = False
        assert build_sequence(tokens, fingerspelling_enabled=False) == ['hat']
        semantic.accepted = True
        assert build_sequence(tokens, fingerspelling_enabled=False) == ['hat', 'computer']

    def test_token_round_trip_keeps_acceptance(self):
        token = Token(kind=TokenKind.RAW, original='pc', span=(0, 1)).as_semantic_match('computer', 0.9)
        token.accepted = False
        restored = Token.from_dict(token.to_dict())
        assert restored.kind == TokenKind.SEMANTIC
        assert restored.source == MatchSource.SEMANTIC
        assert restored.accepted is False
