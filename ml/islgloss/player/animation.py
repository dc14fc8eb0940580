"""
Frame player.

Maps wall-clock time to a frame index at the clip's frame rate and hands
each advanced frame to the renderer. Used by both sentence playback and the
single-word player (play / pause / step / stop).
"""

import asyncio
import logging
from typing import Callable, Optional

from .clips import Clip, ClipNotFound
from .clock import RefreshTicker

logger = logging.getLogger(__name__)


def _noop_status(text: str):
    logger.debug(f"Status: {text}")


class FramePlayer:
    """Playback clock for one loaded clip."""

    def __init__(self, renderer=None):
        self.renderer = renderer
        self.clip: Optional[Clip] = None
        self.frame_index = 0
        self.paused_at = 0
        self.playing = False
        self.finished = False
        self.start_time = 0.0

    @property
    def frame_count(self) -> int:
        return len(self.clip.frames) if self.clip else 0

    @property
    def ms_per_frame(self) -> float:
        return 1000.0 / self.clip.frame_rate

    def load(self, clip: Clip):
        self.stop()
        self.clip = clip

    def play(self, now: float) -> bool:
        """Start or resume the clock at ``now``; resumes from the paused frame."""
        if not self.frame_count:
            return False
        if self.finished:
            self.paused_at = 0
            self.finished = False
        self.playing = True
        if self.paused_at > 0:
            self.start_time = now - self.paused_at * self.ms_per_frame
        else:
            self.start_time = now
        return True

    def pause(self):
        self.playing = False
        self.paused_at = self.frame_index

    def stop(self):
        self.playing = False
        self.finished = False
        self.frame_index = 0
        self.paused_at = 0

    def step_once(self) -> bool:
        """Advance exactly one frame and hold there."""
        if not self.frame_count:
            return False
        self.pause()
        self.frame_index = min(self.frame_index + 1, self.frame_count - 1)
        self.paused_at = self.frame_index
        self.present(self.frame_index)
        return True

    def advance(self, now: float) -> bool:
        """
        Move the clock to ``now`` and present the current frame.

        Returns:
            False once the clip has run past its last frame (or is not playing)
        """
        if not self.playing or not self.frame_count:
            return False
        self.frame_index = max(0, int((now - self.start_time) // self.ms_per_frame))
        if self.frame_index >= self.frame_count:
            self.frame_index = self.frame_count - 1
            self.playing = False
            self.finished = True
            self.paused_at = 0
            return False
        self.present(self.frame_index)
        return True

    @property
    def at_last_frame(self) -> bool:
        return self.frame_count > 0 and self.frame_index >= self.frame_count - 1

    def present(self, index: int):
        if self.renderer is None or not self.frame_count:
            return
        try:
            self.renderer.present(self.clip.frames[index], index)
        except Exception as e:
            logger.warning(f"Renderer failed on frame {index}: {e}")


class WordPlayer:
    """
    Single-word playback: load one clip and play it with transport controls.

    No sequencing and no fingerspelling fallback.
    """

    def __init__(self, clip_store, player: Optional[FramePlayer] = None, ticker=None,
                 on_status: Optional[Callable[[str], None]] = None):
        self.clip_store = clip_store
        self.player = player or FramePlayer()
        self.ticker = ticker or RefreshTicker()
        self.on_status = on_status or _noop_status
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    def _status(self, text: str):
        try:
            self.on_status(text)
        except Exception as e:
            logger.warning(f"Status callback failed: {e}")

    async def load_word(self, word: str) -> bool:
        """
        Fetch a clip, show its first frame and start playing.

        Returns:
            True if playback started
        """
        gloss = (word or '').strip().lower()
        if not gloss:
            self._status('error: enter a word')
            return False

        self.stop()
        self._status(f'loading {gloss} ...')
        try:
            clip = await self.clip_store.fetch_clip(gloss)
        except ClipNotFound as e:
            self._status(f'error: {e.reason}')
            return False
        if not clip.frames:
            self._status('error: no frames found')
            return False

        self.player.load(clip)
        self._status(f'ready: {len(clip.frames)} frames @ {clip.frame_rate:g} fps')
        self.player.present(0)
        return self.play() is not None

    def play(self) -> Optional[asyncio.Task]:
        if not self.player.play(self.ticker.now()):
            self._status('nothing loaded')
            return None
        self._status('playing')
        self._generation += 1
        self._task = asyncio.ensure_future(self._drive(self._generation))
        return self._task

    resume = play

    async def _drive(self, generation: int):
        while self.player.playing and generation == self._generation:
            now = await self.ticker.next_tick()
            if generation != self._generation:
                return
            if not self.player.advance(now):
                break
        if self.player.finished and generation == self._generation:
            self._status('done')

    def pause(self):
        self._generation += 1
        self.player.pause()
        self._status('paused')

    def step_once(self):
        self._generation += 1
        if self.player.step_once():
            self._status('stepping')

    def stop(self):
        self._generation += 1
        self.player.stop()

    async def wait(self):
        """Wait for the current playback run to end."""
        if self._task is not None:
            await self._task
