"""
ISL Text-to-Gloss Translator

Converts English text (typed or transcribed) to an ordered ISL gloss sequence.

Pipeline:
    English Text → Clean/Split → Longest-Match Segmentation → Semantic Fallback → Time-First Ordering
"""

from .lexicon import Lexicon
from .lemmatizer import lemmatize
from .segmenter import MatchSource, Segmenter, Token, TokenKind
from .semantic import SemanticIndex, apply_semantic_fallback
from .sequence import build_sequence
from .translator import Conversion, IslTranslator

__all__ = [
    'Lexicon', 'lemmatize', 'Segmenter', 'Token', 'TokenKind', 'MatchSource',
    'SemanticIndex', 'apply_semantic_fallback', 'build_sequence',
    'Conversion', 'IslTranslator',
]
