"""
Gloss sequence builder.

Selects the tokens that will be signed and applies the one ISL word-order
rule the translator implements: time expressions come first.
"""

from typing import Iterable, List, Optional

from .lexicon import DEFAULT_LEXICON, Lexicon
from .segmenter import Token, TokenKind


def select_tokens(tokens: Iterable[Token], fingerspelling_enabled: bool = True) -> List[Token]:
    """Resolved tokens the user has not rejected, plus raw tokens when they will be fingerspelled."""
    selected = []
    for token in tokens:
        if token.is_resolved:
            if token.accepted is not False:
                selected.append(token)
        elif token.kind == TokenKind.RAW and fingerspelling_enabled:
            selected.append(token)
    return selected


def token_word(token: Token) -> str:
    """The text a token contributes: its canonical gloss, or its surface text when raw."""
    if token.kind == TokenKind.RAW or token.canonical is None:
        return token.original
    return token.canonical


def build_sequence(
    tokens: Iterable[Token],
    fingerspelling_enabled: bool = True,
    lexicon: Optional[Lexicon] = None,
) -> List[str]:
    """
    Build the ordered gloss list from the current token state.

    Resolved time-expression tokens move to the front; both buckets keep
    their original relative order. Raw tokens never move.

    Args:
        tokens: Segmented (and semantically resolved) tokens
        fingerspelling_enabled: Include raw tokens as surface text
        lexicon: Supplies the time-word table

    Returns:
        List of gloss strings
    """
    lexicon = lexicon or DEFAULT_LEXICON
    time_first = []
    others = []
    for token in select_tokens(tokens, fingerspelling_enabled):
        word = token_word(token)
        if token.is_resolved and lexicon.is_time_phrase(word):
            time_first.append(word)
        else:
            others.append(word)
    return time_first + others
