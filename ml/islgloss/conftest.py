"""Shared fakes for the translator and player tests."""

import asyncio

import numpy as np
import pytest

from islgloss.player.clips import Clip, ClipNotFound, ClipStore, Frame


class FakeTicker:
    """Virtual refresh clock: every tick advances time by ``step_ms``."""

    def __init__(self, step_ms=10.0):
        self.time = 0.0
        self.step_ms = step_ms
        self.ticks = 0

    def now(self):
        return self.time

    async def next_tick(self):
        await asyncio.sleep(0)
        self.time += self.step_ms
        self.ticks += 1
        return self.time


class FakeClipStore(ClipStore):
    def __init__(self, clips=None):
        self.clips = dict(clips or {})
        self.fetched = []

    async def fetch_clip(self, gloss):
        self.fetched.append(gloss)
        if gloss not in self.clips:
            raise ClipNotFound(gloss)
        return self.clips[gloss]


class RecordingRenderer:
    def __init__(self):
        self.frames = []

    def present(self, frame, frame_index):
        self.frames.append(frame_index)


class FakeProvider:
    """Embedding provider answering from a fixed table; None for unknown text."""

    def __init__(self, vectors, fail_on=()):
        self.vectors = {k: np.asarray(v, dtype=np.float32) for k, v in vectors.items()}
        self.fail_on = set(fail_on)
        self.calls = []

    async def embed(self, text):
        self.calls.append(text)
        await asyncio.sleep(0)
        if text in self.fail_on:
            return None
        return self.vectors.get(text)


def make_clip(gloss, frame_count, fps=100.0):
    frames = [Frame({'pose': np.zeros((2, 3), dtype=np.float32)}) for _ in range(frame_count)]
    return Clip(gloss=gloss, frames=frames, frame_rate=fps)


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def clip_factory():
    return make_clip


@pytest.fixture
def clip_store():
    return FakeClipStore({
        'hat': make_clip('hat', 5),
        'shirt': make_clip('shirt', 3),
        'empty': make_clip('empty', 0),
    })


@pytest.fixture
def provider_factory():
    return FakeProvider
