"""
Sign Playback

Plays gloss sequences as motion clips, falling back to fingerspelling for
words without a clip.
"""

from .animation import FramePlayer, WordPlayer
from .clips import Clip, ClipNotFound, ClipStore, Frame, HttpClipStore, JsonClipStore, SqliteClipStore
from .clock import RefreshTicker, wait_ms
from .fingerspell import Fingerspeller, FingerspellDisplay
from .scheduler import PlaybackScheduler, PlaybackSession

__all__ = [
    'FramePlayer', 'WordPlayer', 'Clip', 'ClipNotFound', 'ClipStore', 'Frame',
    'HttpClipStore', 'JsonClipStore', 'SqliteClipStore', 'RefreshTicker', 'wait_ms',
    'Fingerspeller', 'FingerspellDisplay', 'PlaybackScheduler', 'PlaybackSession',
]
