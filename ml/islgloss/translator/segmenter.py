"""
Longest-match-first segmenter.

Turns an English sentence into tokens resolved against the ISL vocabulary.
At each cursor position the longest resolvable span wins; unresolved words
become raw tokens unless they are function words, which are dropped.
"""

import dataclasses
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .lemmatizer import lemmatize
from .lexicon import DEFAULT_LEXICON, Lexicon

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r'[.,!?;:]')
_QUOTES_RE = re.compile(r'[\'’"]')
_DASHES_RE = re.compile(r'[-/]')
_WHITESPACE_RE = re.compile(r'\s+')


class TokenKind(Enum):
    MATCHED = "match"
    SEMANTIC = "semantic"
    RAW = "raw"


class MatchSource(Enum):
    EXACT = "exact"
    LEMMA = "lemma"
    ALIAS = "alias"
    SEMANTIC = "semantic"


@dataclass
class Token:
    """One parsed unit of input."""
    kind: TokenKind
    original: str                       # Exact surface text consumed
    span: Tuple[int, int]               # [start, end) word positions
    canonical: Optional[str] = None     # Vocabulary entry, absent when raw
    source: Optional[MatchSource] = None
    score: Optional[float] = None       # Similarity, semantic tokens only
    normalized: Optional[str] = None    # Lower-cased form (raw tokens)
    lemma: Optional[str] = None         # Lemmatized form (raw tokens)
    accepted: bool = True               # User-overridable

    @property
    def is_resolved(self) -> bool:
        return self.kind in (TokenKind.MATCHED, TokenKind.SEMANTIC)

    def as_semantic_match(self, canonical: str, score: float) -> 'Token':
        """Return a resolved copy of a raw token; the original is left untouched."""
        return dataclasses.replace(
            self,
            kind=TokenKind.SEMANTIC,
            canonical=canonical,
            source=MatchSource.SEMANTIC,
            score=score,
            accepted=True,
        )

    def to_dict(self) -> dict:
        data = {
            'kind': self.kind.value,
            'original': self.original,
            'span': list(self.span),
            'accepted': self.accepted,
        }
        if self.canonical is not None:
            data['canonical'] = self.canonical
            data['source'] = self.source.value if self.source else None
        if self.score is not None:
            data['score'] = self.score
        if self.kind == TokenKind.RAW:
            data['normalized'] = self.normalized
            data['lemma'] = self.lemma
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Token':
        source = data.get('source')
        span = data.get('span') or (0, 0)
        return cls(
            kind=TokenKind(data['kind']),
            original=data['original'],
            span=(int(span[0]), int(span[1])),
            canonical=data.get('canonical'),
            source=MatchSource(source) if source else None,
            score=data.get('score'),
            normalized=data.get('normalized'),
            lemma=data.get('lemma'),
            accepted=bool(data.get('accepted', True)),
        )


class Segmenter:
    """
    Greedy longest-match segmenter over a lexicon.

    Usage:
        segmenter = Segmenter()
        tokens = segmenter.segment("good morning, how are you today?")
    """

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or DEFAULT_LEXICON

    def _lemmatize(self, word: str) -> str:
        return lemmatize(word, overrides=self.lexicon.lemma_overrides, rules=self.lexicon.suffix_rules)

    def substitute(self, sentence: str) -> str:
        """Apply the whole-sentence substitution table to a trimmed sentence."""
        text = sentence.strip()
        replacement = self.lexicon.sentence_substitutions.get(text)
        if replacement is not None:
            logger.info(f"Sentence substitution: {text!r} -> {replacement!r}")
            return replacement
        return text

    def split_words(self, sentence: str) -> List[str]:
        """
        Clean a sentence and split it into surface words.

        Strips sentence punctuation and quotes, turns dashes and slashes
        into spaces and collapses whitespace.
        """
        text = self.substitute(sentence)
        text = _PUNCTUATION_RE.sub('', text)
        text = _QUOTES_RE.sub('', text)
        text = _DASHES_RE.sub(' ', text)
        text = _WHITESPACE_RE.sub(' ', text).strip()
        return text.split(' ') if text else []

    def resolve_phrase(self, candidate: str, candidate_lemma: str) -> Optional[Tuple[str, MatchSource]]:
        """
        Resolve a lower-cased span against the lexicon.

        Priority: exact vocabulary, lemma vocabulary, alias, lemma alias.
        """
        lexicon = self.lexicon
        if lexicon.is_vocabulary(candidate):
            return candidate, MatchSource.EXACT
        if candidate_lemma and lexicon.is_vocabulary(candidate_lemma):
            return candidate_lemma, MatchSource.LEMMA
        target = lexicon.alias_target(candidate)
        if target is not None:
            return target, MatchSource.ALIAS
        if candidate_lemma:
            target = lexicon.alias_target(candidate_lemma)
            if target is not None:
                return target, MatchSource.ALIAS
        return None

    def segment(self, sentence: str) -> List[Token]:
        """
        Segment a sentence into tokens.

        Args:
            sentence: Free-form English text

        Returns:
            Tokens in input order. Every word lands in exactly one token span
            except dropped function words.
        """
        return self.segment_words(self.split_words(sentence or ''))

    def segment_words(self, raw_words: List[str]) -> List[Token]:
        """Segment an already cleaned word sequence."""
        if not raw_words:
            return []

        normalized = [w.lower() for w in raw_words]
        lemmas = [self._lemmatize(w) for w in normalized]

        tokens: List[Token] = []
        total = len(normalized)
        position = 0

        while position < total:
            matched = False
            for length in range(total - position, 0, -1):
                end = position + length
                span_normalized = ' '.join(normalized[position:end])
                span_lemma = ' '.join(lemmas[position:end])
                resolved = self.resolve_phrase(span_normalized, span_lemma)
                if resolved:
                    canonical, source = resolved
                    tokens.append(Token(
                        kind=TokenKind.MATCHED,
                        original=' '.join(raw_words[position:end]),
                        span=(position, end),
                        canonical=canonical,
                        source=source,
                        accepted=True,
                    ))
                    position = end
                    matched = True
                    break

            if not matched:
                word = normalized[position]
                if not self.lexicon.is_function_word(word):
                    tokens.append(Token(
                        kind=TokenKind.RAW,
                        original=raw_words[position],
                        span=(position, position + 1),
                        normalized=word,
                        lemma=lemmas[position],
                        accepted=False,
                    ))
                position += 1

        return tokens
