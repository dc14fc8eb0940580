"""
Rule-based lemmatizer.

Reduces a surface word to the stem the segmenter compares against the
vocabulary. Irregular forms come from an override table, everything else
from an ordered list of suffix rules.
"""

from typing import Dict, Optional, Sequence

from .lexicon import LEMMA_OVERRIDES, LEMMA_SUFFIX_RULES, SuffixRule

MIN_STEM_LENGTH = 2


def lemmatize(
    word: str,
    overrides: Optional[Dict[str, str]] = None,
    rules: Optional[Sequence[SuffixRule]] = None,
) -> str:
    """
    Lemmatize a single word.

    Args:
        word: Surface form, any case
        overrides: Irregular form table (defaults to the lexicon's)
        rules: Ordered suffix rules (defaults to the lexicon's)

    Returns:
        The lower-cased stem. Never raises; an unmatched word comes back
        lower-cased and otherwise unchanged.
    """
    if not word:
        return ''
    overrides = LEMMA_OVERRIDES if overrides is None else overrides
    rules = LEMMA_SUFFIX_RULES if rules is None else rules

    lower = word.lower()
    if lower in overrides:
        return overrides[lower]

    for rule in rules:
        if not lower.endswith(rule.suffix):
            continue
        if len(lower) <= rule.min_length:
            continue
        if rule.skip_double and lower.endswith(rule.suffix + rule.suffix[-1]):
            continue
        if rule.suffix == 's' and lower.endswith('ss'):
            continue
        stem = lower[:-len(rule.suffix)] + rule.replacement
        if len(stem) >= MIN_STEM_LENGTH:
            return stem

    return lower
