"""
WebSocket handlers for live playback.

Clients ask for a sentence or a single word; frames, fingerspelled letters,
status lines and progress are pushed back as Socket.IO events. Playback runs
on one asyncio loop owned by an AsyncRunner thread.
"""

import asyncio
import logging
import threading

from flask_socketio import emit

from .player.clips import clip_store_from_config
from .player.clock import RefreshTicker
from .player.fingerspell import FingerspellDisplay, Fingerspeller
from .player.scheduler import PlaybackScheduler
from .translator import IslTranslator

logger = logging.getLogger(__name__)


class AsyncRunner:
    """Runs an asyncio event loop on a daemon thread."""

    def __init__(self, name='islgloss-loop'):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._thread.start()

    def _serve(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def submit(self, coro):
        """Schedule a coroutine; returns a concurrent.futures.Future."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def run(self, coro, timeout=None):
        """Run a coroutine on the loop and block for its result."""
        return self.submit(coro).result(timeout)

    def call(self, fn, *args):
        self.loop.call_soon_threadsafe(fn, *args)

    def close(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=5)


class SocketRenderer:
    """Renderer that pushes every presented frame to connected clients."""

    def __init__(self, socketio, scheduler=None):
        self.socketio = socketio
        self.scheduler = scheduler

    def present(self, frame, frame_index):
        clip = self.scheduler.player.clip if self.scheduler else None
        self.socketio.emit('frame', {
            'gloss': clip.gloss if clip else None,
            'index': frame_index,
            'total': len(clip.frames) if clip else None,
            'frame': frame.to_dict(),
        })


class SocketFingerspellDisplay(FingerspellDisplay):
    """Fingerspelling overlay driven over the socket."""

    def __init__(self, socketio):
        self.socketio = socketio

    def show(self, word):
        self.socketio.emit('fingerspell', {'action': 'show', 'word': word})

    def update(self, word, letter, index, total, image_path):
        self.socketio.emit('fingerspell', {
            'action': 'update',
            'word': word,
            'letter': letter,
            'index': index,
            'total': total,
            'image': image_path,
        })

    def hide(self):
        self.socketio.emit('fingerspell', {'action': 'hide'})


def register_socketio_handlers(socketio, translator=None, clip_store=None, runner=None):
    """
    Register live playback events.

    Events received:
        play_sentence  {'glosses': [...]} or {'text': '...'}, optional 'loop'
        stop_sentence
        play_word      {'word': '...'}

    Events emitted:
        status, progress, frame, fingerspell

    Returns:
        The PlaybackScheduler driving playback
    """
    translator = translator or IslTranslator()
    clip_store = clip_store or clip_store_from_config(translator.lexicon)
    runner = runner or AsyncRunner()

    def send_status(text):
        socketio.emit('status', {'message': text})

    def send_progress(text):
        socketio.emit('progress', {'message': text})

    ticker = RefreshTicker()
    renderer = SocketRenderer(socketio)
    scheduler = PlaybackScheduler(
        clip_store,
        renderer=renderer,
        fingerspeller=Fingerspeller(
            display=SocketFingerspellDisplay(socketio),
            ticker=ticker,
            on_status=send_status,
        ),
        ticker=ticker,
        fingerspelling_enabled=translator.fingerspelling_enabled,
        on_status=send_status,
        on_progress=send_progress,
    )
    renderer.scheduler = scheduler

    async def start_sentence(glosses, text, loop):
        if glosses is None:
            conversion = await translator.translate(text)
            glosses = conversion.glosses
        if not glosses:
            send_status('nothing to play')
            return []
        scheduler.start(glosses, loop)
        return glosses

    @socketio.on('play_sentence')
    def handle_play_sentence(data):
        data = data or {}
        glosses = data.get('glosses')
        text = data.get('text')
        if glosses is not None and not isinstance(glosses, list):
            emit('status', {'message': 'error: glosses must be a list'})
            return
        if glosses is None and not (isinstance(text, str) and text.strip()):
            emit('status', {'message': 'error: text or glosses required'})
            return

        glosses = runner.run(start_sentence(glosses, text, data.get('loop')))
        emit('sentence', {'glosses': glosses})

    @socketio.on('stop_sentence')
    def handle_stop_sentence(data=None):
        runner.call(scheduler.stop)

    @socketio.on('play_word')
    def handle_play_word(data):
        word = (data or {}).get('word', '')
        runner.submit(scheduler.play_word(word))

    logger.info("Live playback handlers registered")
    return scheduler
