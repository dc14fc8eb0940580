"""
End-to-end tests for IslTranslator.
"""

import asyncio

import pytest

from islgloss.translator import IslTranslator, Lexicon, SemanticIndex, TokenKind


@pytest.fixture
def translator():
    return IslTranslator(fingerspelling_enabled=True)


@pytest.fixture
def laptop_translator(provider_factory):
    """Translator whose only route from 'laptop' to 'computer' is the semantic index."""
    lexicon = Lexicon(vocabulary=['computer', 'loud', 'monday'], aliases={})
    provider = provider_factory({
        'computer': [1, 0, 0],
        'loud': [0, 1, 0],
        'monday': [0, 0, 1],
        'laptop': [0.97, 0.1, 0],
        'zebra': [0.3, 0.3, 0.3],
    })
    index = SemanticIndex(vocabulary=lexicon.vocabulary, provider=provider)
    return IslTranslator(lexicon=lexicon, semantic_index=index, fingerspelling_enabled=True)


def test_today_i_am_happy(translator):
    conversion = translator.translate_sync('today I am happy')
    assert conversion.glosses == ['today', 'happy']
    assert conversion.dropped_words == ['I', 'am']
    assert conversion.semantic_applied == []


def test_the_pc_is_loud(translator):
    conversion = translator.translate_sync('the pc is loud')
    assert conversion.glosses == ['computer', 'loud']
    assert conversion.dropped_words == ['the', 'is']
    assert conversion.unmatched_words() == []


def test_time_marker_note(translator):
    conversion = translator.translate_sync('shirt on Monday')
    assert conversion.glosses == ['monday', 'shirt']
    notes = conversion.grammar_notes()
    assert 'Time markers moved to sentence start: monday' in notes
    assert 'Function words dropped: on' in notes


def test_no_time_note_when_order_unchanged(translator):
    conversion = translator.translate_sync('monday shirt')
    assert not any(n.startswith('Time markers') for n in conversion.grammar_notes())


def test_semantic_match_can_be_rejected(laptop_translator):
    conversion = laptop_translator.translate_sync('the laptop is loud')

    assert conversion.glosses == ['computer', 'loud']
    assert len(conversion.semantic_applied) == 1
    index = conversion.semantic_applied[0]['index']
    assert conversion.tokens[index].kind == TokenKind.SEMANTIC

    assert conversion.set_accepted(index, False) == ['loud']
    assert any('rejected' in n for n in conversion.grammar_notes())
    assert conversion.set_accepted(index, True) == ['computer', 'loud']


def test_set_accepted_only_for_semantic_tokens(laptop_translator):
    conversion = laptop_translator.translate_sync('loud')
    with pytest.raises(ValueError):
        conversion.set_accepted(0, False)


def test_unresolved_words_are_fingerspelled(laptop_translator):
    conversion = laptop_translator.translate_sync('zebra on monday')
    assert conversion.glosses == ['monday', 'zebra']
    assert conversion.fingerspell_words() == ['zebra']
    assert any(n.startswith('Fingerspelled') for n in conversion.grammar_notes())

    laptop_translator.fingerspelling_enabled = False
    quiet = laptop_translator.translate_sync('zebra on monday')
    assert quiet.glosses == ['monday']
    assert quiet.fingerspell_words() == []
    assert quiet.unmatched_words() == ['zebra']


def test_rebuild_sequence_without_resegmenting(laptop_translator):
    conversion = laptop_translator.translate_sync('laptop monday')
    tokens = conversion.tokens
    tokens[0].accepted = False
    assert laptop_translator.rebuild_sequence(tokens) == ['monday']


def test_to_dict(translator):
    data = translator.translate_sync('Good morning!').to_dict()
    assert data['input'] == 'Good morning!'
    assert data['gloss_sequence'] == ['good morning']
    assert data['tokens'][0]['kind'] == 'match'
    assert data['tokens'][0]['source'] == 'exact'


def test_empty_input(translator):
    conversion = translator.translate_sync('   ')
    assert conversion.tokens == []
    assert conversion.glosses == []


def test_concurrent_translations_share_index(laptop_translator, provider_factory):
    async def scenario():
        return await asyncio.gather(
            laptop_translator.translate('laptop'),
            laptop_translator.translate('zebra laptop'),
        )

    first, second = asyncio.run(scenario())
    provider = laptop_translator.semantic_index.provider
    for word in ['computer', 'loud', 'monday']:
        assert provider.calls.count(word) == 1
    assert first.glosses == ['computer']
    assert second.glosses == ['zebra', 'computer']


def test_available_signs(translator):
    signs = translator.get_available_signs()
    assert 'cell phone' in signs
    assert len(signs) == 38
