"""
ISL Text-to-Gloss Translator

Main entry point for translating English text to an ISL gloss sequence.

Pipeline:
    English Text → Segment (lexicon, lemmas, aliases) → Semantic Fallback → Gloss Sequence
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..shared.config import FINGERSPELL_CONFIG
from .lexicon import DEFAULT_LEXICON, Lexicon
from .segmenter import Segmenter, Token, TokenKind
from .semantic import SemanticIndex, apply_semantic_fallback
from .sequence import build_sequence, select_tokens, token_word

logger = logging.getLogger(__name__)


@dataclass
class Conversion:
    """Result of translating one sentence; glosses follow the tokens' accepted flags."""
    input: str
    tokens: List[Token]
    semantic_applied: List[Dict] = field(default_factory=list)
    dropped_words: List[str] = field(default_factory=list)
    fingerspelling_enabled: bool = True
    lexicon: Lexicon = field(default=DEFAULT_LEXICON, repr=False)

    @property
    def glosses(self) -> List[str]:
        return build_sequence(self.tokens, self.fingerspelling_enabled, self.lexicon)

    def set_accepted(self, index: int, accepted: bool) -> List[str]:
        """
        Accept or reject a semantic substitution without re-segmenting.

        Returns:
            The recomputed gloss sequence
        """
        token = self.tokens[index]
        if token.kind != TokenKind.SEMANTIC:
            raise ValueError(f"Token {index} ({token.original!r}) is not a semantic match")
        token.accepted = bool(accepted)
        return self.glosses

    def unmatched_words(self) -> List[str]:
        return [t.original.lower() for t in self.tokens if t.kind == TokenKind.RAW]

    def fingerspell_words(self) -> List[str]:
        return self.unmatched_words() if self.fingerspelling_enabled else []

    def grammar_notes(self) -> List[str]:
        """Explain the translation choices."""
        notes = []

        if self.dropped_words:
            notes.append(f"Function words dropped: {', '.join(self.dropped_words)}")

        selected = select_tokens(self.tokens, self.fingerspelling_enabled)
        english_order = [token_word(t) for t in selected]
        if english_order != self.glosses:
            time_glosses = [token_word(t) for t in selected
                            if t.is_resolved and self.lexicon.is_time_phrase(token_word(t))]
            notes.append(f"Time markers moved to sentence start: {', '.join(time_glosses)}")

        for item in self.semantic_applied:
            token = self.tokens[item['index']]
            state = 'accepted' if token.accepted else 'rejected'
            notes.append(
                f"Semantic match {item['original']!r} -> {item['canonical']!r} "
                f"(score {item['score']:.2f}, {state})"
            )

        spelled = self.fingerspell_words()
        if spelled:
            notes.append(f"Fingerspelled (no sign available): {', '.join(spelled)}")

        return notes

    def to_dict(self) -> Dict:
        return {
            'input': self.input,
            'gloss_sequence': self.glosses,
            'tokens': [t.to_dict() for t in self.tokens],
            'semantic_applied': self.semantic_applied,
            'unmatched': self.unmatched_words(),
            'fingerspell': self.fingerspell_words(),
            'grammar_notes': self.grammar_notes(),
        }


class IslTranslator:
    """
    Main translator class for English → ISL glosses.

    Usage:
        translator = IslTranslator()
        conversion = await translator.translate("the pc is loud")
        conversion.glosses   # ['computer', 'loud']
    """

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        semantic_index: Optional[SemanticIndex] = None,
        fingerspelling_enabled: Optional[bool] = None,
    ):
        """
        Initialize the translator.

        Args:
            lexicon: Vocabulary and resolution tables. Defaults to the ISL dataset.
            semantic_index: Shared similarity index. Built from config if None.
            fingerspelling_enabled: Keep raw words for fingerspelling. Defaults to config.
        """
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.segmenter = Segmenter(self.lexicon)
        self.semantic_index = semantic_index or SemanticIndex.from_config(self.lexicon)
        if fingerspelling_enabled is None:
            fingerspelling_enabled = FINGERSPELL_CONFIG['enabled']
        self.fingerspelling_enabled = fingerspelling_enabled

    async def translate(self, text: str) -> Conversion:
        """
        Translate English text to an ISL gloss sequence.

        Args:
            text: English sentence or voice transcript

        Returns:
            Conversion with tokens, semantic substitutions and glosses
        """
        words = self.segmenter.split_words(text or '')
        tokens = self.segmenter.segment_words(words)
        tokens, applied = await apply_semantic_fallback(tokens, self.semantic_index)

        conversion = Conversion(
            input=text,
            tokens=tokens,
            semantic_applied=applied,
            dropped_words=self._dropped_words(words, tokens),
            fingerspelling_enabled=self.fingerspelling_enabled,
            lexicon=self.lexicon,
        )
        logger.debug(f"Translated {text!r} -> {conversion.glosses}")
        return conversion

    def translate_sync(self, text: str) -> Conversion:
        """Blocking wrapper for callers outside an event loop."""
        return asyncio.run(self.translate(text))

    def _dropped_words(self, words: List[str], tokens: List[Token]) -> List[str]:
        covered = set()
        for token in tokens:
            covered.update(range(*token.span))
        return [w for i, w in enumerate(words) if i not in covered]

    def rebuild_sequence(self, tokens: List[Token]) -> List[str]:
        """Gloss sequence for an edited token list (no re-segmentation)."""
        return build_sequence(tokens, self.fingerspelling_enabled, self.lexicon)

    def get_available_signs(self) -> List[str]:
        """Get list of all glosses with a motion clip."""
        return list(self.lexicon.vocabulary)


if __name__ == '__main__':
    test_sentences = [
        "today I am happy",
        "the pc is loud",
        "Good morning, how are you?",
        "my shirt and hat on Monday",
        "I dream about a laptop",
    ]

    translator = IslTranslator()

    for sentence in test_sentences:
        print(f"\n{'='*60}")
        print(f"Input: {sentence}")
        print(f"{'='*60}")

        result = translator.translate_sync(sentence)

        print(f"Gloss: {' '.join(result.glosses)}")
        for note in result.grammar_notes():
            print(f"  • {note}")
