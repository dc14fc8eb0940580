"""
Fingerspelling fallback.

Spells a word letter by letter for glosses with no motion clip. The overlay
itself (popup, letter images) belongs to a display object; this module only
decides which letters to show and for how long.
"""

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional

from ..shared.config import FINGERSPELL_CONFIG
from .clock import RefreshTicker, wait_ms

logger = logging.getLogger(__name__)

SPELLABLE = re.compile(r'^[A-Z0-9]$')
NON_SPELLABLE = re.compile(r'[^A-Z0-9]')


def normalize_word(word: str) -> str:
    """Upper-case and keep only A-Z / 0-9."""
    return NON_SPELLABLE.sub('', (word or '').upper())


class FingerspellDisplay:
    """Overlay interface. The default implementation only logs."""

    def show(self, word: str):
        logger.debug(f"Overlay shown for {word}")

    def update(self, word: str, letter: Optional[str], index: int, total: int,
               image_path: Optional[str]):
        """Highlight ``letter`` at ``index``; ``letter`` None means the word is complete."""
        logger.debug(f"Overlay {word}: {letter or 'complete'}")

    def hide(self):
        logger.debug("Overlay hidden")


class Fingerspeller:
    """Letter-by-letter spelling with cancellable waits."""

    def __init__(
        self,
        display: Optional[FingerspellDisplay] = None,
        image_dir: Optional[str] = None,
        letter_delay_ms: Optional[float] = None,
        end_delay_ms: Optional[float] = None,
        ticker=None,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.display = display or FingerspellDisplay()
        image_dir = image_dir if image_dir is not None else FINGERSPELL_CONFIG['image_dir']
        self.image_dir = Path(image_dir) if image_dir else None
        self.letter_delay_ms = (FINGERSPELL_CONFIG['letter_delay_ms']
                                if letter_delay_ms is None else letter_delay_ms)
        self.end_delay_ms = FINGERSPELL_CONFIG['end_delay_ms'] if end_delay_ms is None else end_delay_ms
        self.ticker = ticker or RefreshTicker()
        self.on_status = on_status
        self.active = False
        self.current_word = ''
        self._run_id = 0

    def letter_image_path(self, letter: str) -> Optional[str]:
        """
        Image for one letter, or None when it cannot be shown.

        Without an image directory every A-Z / 0-9 letter is displayable and
        the path is the bare ``<LETTER>.jpg`` name.
        """
        upper = (letter or '').upper()
        if not SPELLABLE.match(upper):
            return None
        if self.image_dir is None:
            return f"{upper}.jpg"
        path = self.image_dir / f"{upper}.jpg"
        return str(path) if path.is_file() else None

    def displayable_letters(self, word: str) -> List[str]:
        return [letter for letter in normalize_word(word) if self.letter_image_path(letter)]

    def _status(self, text: str):
        if self.on_status is None:
            return
        try:
            self.on_status(text)
        except Exception as e:
            logger.warning(f"Status callback failed: {e}")

    def _display(self, method: str, *args):
        try:
            getattr(self.display, method)(*args)
        except Exception as e:
            logger.warning(f"Fingerspell display {method} failed: {e}")

    async def spell_word(self, word: str) -> bool:
        """
        Show each displayable letter of ``word`` in turn.

        Returns:
            True if the word was spelled to the end, False if it had no
            displayable letters or was hidden part way through
        """
        if not word or not isinstance(word, str):
            logger.warning(f"Cannot fingerspell: invalid word {word!r}")
            return False

        normalized = normalize_word(word)
        if not normalized:
            logger.warning(f"Cannot fingerspell: no valid characters in '{word}'")
            return False

        self._run_id += 1
        run_id = self._run_id
        self.active = True
        self.current_word = normalized
        logger.info(f"Fingerspelling word: {normalized}")
        self._display('show', normalized)

        def still_spelling():
            return self.active and self._run_id == run_id

        shown = 0
        for idx, letter in enumerate(normalized):
            image_path = self.letter_image_path(letter)
            if image_path is None:
                logger.warning(f"Skipping letter {letter}: image not available")
                continue

            shown += 1
            self._display('update', normalized, letter, idx, len(normalized), image_path)
            self._status(f"Fingerspelling: {normalized} [{letter}]")
            if not await wait_ms(self.ticker, self.letter_delay_ms, still_spelling):
                return False

        if shown == 0:
            logger.warning(f"No displayable letters in word: {normalized}")
            self.hide()
            return False

        self._display('update', normalized, None, 0, len(normalized), None)
        self._status(f"Fingerspelling complete: {normalized}")
        if not await wait_ms(self.ticker, self.end_delay_ms, still_spelling):
            return False

        self.hide()
        return True

    def hide(self):
        """Dismiss the overlay; an in-flight ``spell_word`` stops on its next tick."""
        was_active = self.active
        self.active = False
        self.current_word = ''
        if was_active:
            self._display('hide')
