"""
Sentence playback scheduler.

Plays a gloss sequence one word at a time: fetch the clip, run the frame
clock to the last frame, or fall back to fingerspelling when there is no
usable clip. One session is active at a time; starting a new one or calling
``stop()`` clears the old session's ``active`` flag and every wait in it ends
on the next refresh tick.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from ..shared.config import FINGERSPELL_CONFIG, PLAYBACK_CONFIG
from .animation import FramePlayer, WordPlayer
from .clips import Clip, ClipNotFound, ClipStore
from .clock import RefreshTicker
from .fingerspell import Fingerspeller

logger = logging.getLogger(__name__)


@dataclass
class PlaybackSession:
    glosses: List[str] = field(default_factory=list)
    loop: bool = False
    active: bool = True
    current_index: int = 0


class PlaybackScheduler:
    """
    Drives sentence and single-word playback against one renderer.

    Args:
        clip_store: Source of motion clips
        renderer: Object with ``present(frame, frame_index)``
        fingerspeller: Fallback for words without a clip
        ticker: Display refresh tick source
        fingerspelling_enabled: Spell missing words instead of skipping them
        on_status: Called with free-text status lines
        on_progress: Called with ``Word i/n: WORD`` (empty string when idle)
        clip_timeout_s: Give up on a clip fetch after this long (None waits forever)
    """

    def __init__(
        self,
        clip_store: ClipStore,
        renderer=None,
        fingerspeller: Optional[Fingerspeller] = None,
        ticker=None,
        fingerspelling_enabled: Optional[bool] = None,
        on_status: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[str], None]] = None,
        clip_timeout_s: Optional[float] = None,
    ):
        self.clip_store = clip_store
        self.ticker = ticker or RefreshTicker()
        self.on_status = on_status
        self.on_progress = on_progress
        self.fingerspelling_enabled = (FINGERSPELL_CONFIG['enabled']
                                       if fingerspelling_enabled is None else fingerspelling_enabled)
        self.clip_timeout_s = PLAYBACK_CONFIG['clip_timeout_s'] if clip_timeout_s is None else clip_timeout_s
        self.player = FramePlayer(renderer)
        self.fingerspeller = fingerspeller or Fingerspeller(ticker=self.ticker, on_status=self._status)
        self.word_player = WordPlayer(clip_store, player=self.player, ticker=self.ticker,
                                      on_status=self._status)
        self.session: Optional[PlaybackSession] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.session is not None and self.session.active

    def _notify(self, callback, text: str):
        if callback is None:
            return
        try:
            callback(text)
        except Exception as e:
            logger.warning(f"Callback failed: {e}")

    def _status(self, text: str):
        self._notify(self.on_status, text)

    def _progress(self, text: str):
        self._notify(self.on_progress, text)

    def start(self, glosses: Iterable[str], loop: Optional[bool] = None) -> Optional[asyncio.Task]:
        """
        Begin sentence playback, replacing any active session.

        Must be called from a running event loop. An empty gloss list does
        nothing.

        Returns:
            The task driving the new session, or None
        """
        glosses = [g for g in (glosses or []) if g]
        if not glosses:
            return None

        self._release_session()
        session = PlaybackSession(
            glosses=glosses,
            loop=PLAYBACK_CONFIG['loop'] if loop is None else bool(loop),
        )
        self.session = session
        logger.info(f"Sentence playback started: {glosses} (loop={session.loop})")
        self._task = asyncio.ensure_future(self._run(session))
        return self._task

    async def play_sentence(self, glosses: Iterable[str], loop: Optional[bool] = None):
        """Start a session and wait until it ends (completion or stop)."""
        task = self.start(glosses, loop)
        if task is not None:
            await task

    def stop(self):
        """Stop sentence playback. Safe to call when nothing is playing."""
        if self.session is None:
            return
        self._release_session()
        self._progress('')
        self._status('sentence playback stopped')
        logger.info("Sentence playback stopped")

    def _release_session(self):
        if self.session is not None:
            self.session.active = False
            self.session.current_index = 0
        self.session = None
        self.word_player.stop()
        self.fingerspeller.hide()

    async def play_word(self, word: str) -> bool:
        """Single-word mode: stops any sentence, then loads and plays one clip."""
        if self.session is not None:
            self.stop()
        return await self.word_player.load_word(word)

    async def _run(self, session: PlaybackSession):
        try:
            while session.active:
                if session.current_index >= len(session.glosses):
                    if session.loop and session.glosses:
                        session.current_index = 0
                        await self.ticker.next_tick()
                        continue
                    break
                await self._play_item(session, session.glosses[session.current_index])
                if not session.active:
                    break
                session.current_index += 1
        finally:
            if self.session is session:
                self.stop()

    async def _fetch(self, gloss: str) -> Clip:
        if not self.clip_timeout_s:
            return await self.clip_store.fetch_clip(gloss)
        try:
            return await asyncio.wait_for(self.clip_store.fetch_clip(gloss), self.clip_timeout_s)
        except asyncio.TimeoutError:
            raise ClipNotFound(gloss, 'timed out')

    async def _play_item(self, session: PlaybackSession, gloss: str):
        display = gloss.upper()
        self._progress(f"Word {session.current_index + 1}/{len(session.glosses)}: {display}")
        self._status(f"playing: {display}")

        clip = None
        reason = None
        try:
            clip = await self._fetch(gloss)
        except ClipNotFound as e:
            reason = e.reason
            logger.warning(f"Clip load failed for '{gloss}': {reason}")
        if not session.active:
            return

        if clip is not None and clip.frames:
            await self._play_clip(session, clip)
            return

        if clip is not None:
            self._status(f"Error: no frames in {gloss}")
        elif self.fingerspelling_enabled:
            self._status(f"Word not found: {gloss} - fingerspelling...")
        else:
            self._status(f"Error loading {gloss}: {reason} (skipped)")

        if self.fingerspelling_enabled:
            await self.fingerspeller.spell_word(gloss)

    async def _play_clip(self, session: PlaybackSession, clip: Clip) -> bool:
        """Run the frame clock until the last frame; False if the session ended first."""
        self.player.load(clip)
        self.player.play(self.ticker.now())
        self.player.advance(self.ticker.now())
        while session.active:
            if self.player.at_last_frame or not self.player.playing:
                if not self.fingerspeller.active:
                    return True
            now = await self.ticker.next_tick()
            if not session.active:
                break
            self.player.advance(now)
        return False
