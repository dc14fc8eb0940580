"""
Motion clip store.

A clip is the recorded landmark sequence for one gloss. Stores hand clips to
the playback scheduler, which only counts and indexes frames; the landmark
payload is for the renderer.
"""

import asyncio
import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote

import aiohttp
import numpy as np

from .. import database
from ..shared.config import PATHS, PLAYBACK_CONFIG
from ..translator.lexicon import CLIP_FILE_SUFFIX, DEFAULT_LEXICON, Lexicon

logger = logging.getLogger(__name__)

DEFAULT_GROUP = 'pose'


class ClipNotFound(LookupError):
    """No clip exists (or it could not be read) for a gloss."""

    def __init__(self, gloss: str, reason: str = 'not found'):
        super().__init__(f"{gloss}: {reason}")
        self.gloss = gloss
        self.reason = reason


@dataclass(eq=False)
class Frame:
    """One motion frame: named landmark groups, each an (n, 3) float32 array."""
    groups: Dict[str, np.ndarray] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, List[List[float]]]:
        return {name: points.tolist() for name, points in self.groups.items()}


@dataclass(eq=False)
class Clip:
    gloss: str
    frames: List[Frame]
    frame_rate: float

    def __len__(self):
        return len(self.frames)

    @property
    def duration_ms(self) -> float:
        return len(self.frames) * 1000.0 / self.frame_rate

    def to_dict(self) -> Dict:
        return {
            'gloss': self.gloss,
            'fps': self.frame_rate,
            'frame_count': len(self.frames),
            'duration_ms': self.duration_ms,
            'frames': [f.to_dict() for f in self.frames],
        }


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and np.isfinite(value)


def _is_point_list(value) -> bool:
    if not isinstance(value, list) or not value:
        return False
    first = value[0]
    if isinstance(first, (list, tuple)):
        return len(first) >= 2 and _is_number(first[0]) and _is_number(first[1])
    if isinstance(first, dict):
        return 'x' in first and 'y' in first
    return False


def _to_points(value: list) -> np.ndarray:
    points = []
    for p in value:
        if isinstance(p, dict):
            points.append((float(p['x']), float(p['y']), float(p.get('z', 0) or 0)))
        else:
            z = p[2] if len(p) > 2 and p[2] is not None else 0
            points.append((float(p[0]), float(p[1]), float(z)))
    return np.asarray(points, dtype=np.float32).reshape(-1, 3)


def _collect_groups(value, name: str, out: Dict[str, np.ndarray]):
    if _is_point_list(value):
        out[name] = _to_points(value)
    elif isinstance(value, dict):
        for key, child in value.items():
            _collect_groups(child, str(key), out)
    elif isinstance(value, list):
        for idx, child in enumerate(value):
            _collect_groups(child, f"{name}_{idx}", out)


def frame_from_payload(payload) -> Frame:
    """
    Parse one frame of clip JSON.

    Accepts a dict of group name -> points, a bare point list (named
    ``pose``), or nested lists of point lists. Points are ``[x, y]``,
    ``[x, y, z]`` or ``{x, y, z}``; missing z becomes 0.
    """
    groups: Dict[str, np.ndarray] = {}
    if _is_point_list(payload):
        groups[DEFAULT_GROUP] = _to_points(payload)
    elif isinstance(payload, dict):
        for key, child in payload.items():
            _collect_groups(child, str(key), groups)
    elif isinstance(payload, list):
        for idx, child in enumerate(payload):
            _collect_groups(child, f"group_{idx}", groups)
    return Frame(groups)


def clamp_frame_rate(value, default: Optional[float] = None) -> float:
    default = PLAYBACK_CONFIG['default_fps'] if default is None else default
    try:
        fps = float(value)
    except (TypeError, ValueError):
        fps = 0.0
    if not fps or not np.isfinite(fps):
        fps = default
    return max(PLAYBACK_CONFIG['min_fps'], min(PLAYBACK_CONFIG['max_fps'], fps))


def normalize_clip_payload(gloss: str, payload, default_fps: Optional[float] = None) -> Clip:
    """
    Normalize clip JSON into a Clip.

    The payload is either a bare list of frames or an object carrying
    ``frames`` or ``sequence`` and an optional ``fps`` / ``frame_rate``.
    A payload without any frame list yields an empty clip.
    """
    raw_frames = None
    fps = default_fps
    if isinstance(payload, list):
        raw_frames = payload
    elif isinstance(payload, dict):
        if isinstance(payload.get('frames'), list):
            raw_frames = payload['frames']
        if isinstance(payload.get('sequence'), list):
            raw_frames = payload['sequence']
        if _is_number(payload.get('fps')):
            fps = payload['fps']
        if _is_number(payload.get('frame_rate')):
            fps = payload['frame_rate']

    frames = [frame_from_payload(f) for f in (raw_frames or [])]
    return Clip(gloss=gloss, frames=frames, frame_rate=clamp_frame_rate(fps, default_fps))


def is_clip_name(gloss: str) -> bool:
    """A gloss usable as a clip file stem: non-empty, no path separators or parent references."""
    name = (gloss or '').strip()
    return bool(name) and '/' not in name and '\\' not in name and name not in ('.', '..')


class ClipStore:
    """Base class: ``fetch_clip`` returns a Clip or raises ClipNotFound."""

    async def fetch_clip(self, gloss: str) -> Clip:
        raise NotImplementedError


class JsonClipStore(ClipStore):
    """Canonical clips stored as ``<Filename>_canonical_median.json`` in a directory."""

    def __init__(self, clip_dir: Optional[str] = None, lexicon: Optional[Lexicon] = None):
        self.clip_dir = Path(clip_dir or PATHS['clip_dir'])
        self.lexicon = lexicon or DEFAULT_LEXICON

    def clip_path(self, gloss: str) -> Path:
        return self.clip_dir / f"{self.lexicon.clip_filename(gloss)}{CLIP_FILE_SUFFIX}"

    async def fetch_clip(self, gloss: str) -> Clip:
        if not is_clip_name(gloss):
            raise ClipNotFound(gloss, 'invalid clip name')
        path = self.clip_path(gloss)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except FileNotFoundError:
            raise ClipNotFound(gloss, f"no clip file {path.name}")
        except (OSError, ValueError) as e:
            raise ClipNotFound(gloss, f"unreadable clip file {path.name}: {e}") from e
        return normalize_clip_payload(gloss, payload)


class HttpClipStore(ClipStore):
    """Canonical clips served over HTTP under a base URL."""

    def __init__(self, base_url: Optional[str] = None, lexicon: Optional[Lexicon] = None,
                 timeout_s: Optional[float] = None):
        self.base_url = (base_url or PATHS['clip_base_url'] or '').rstrip('/')
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.timeout_s = timeout_s

    def clip_url(self, gloss: str) -> str:
        return f"{self.base_url}/{quote(self.lexicon.clip_filename(gloss))}{CLIP_FILE_SUFFIX}"

    async def fetch_clip(self, gloss: str) -> Clip:
        url = self.clip_url(gloss)
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as resp:
                    if resp.status != 200:
                        raise ClipNotFound(gloss, f"HTTP {resp.status}")
                    payload = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            raise ClipNotFound(gloss, 'timed out')
        except aiohttp.ClientError as e:
            raise ClipNotFound(gloss, str(e)) from e
        except ValueError as e:
            raise ClipNotFound(gloss, f"invalid JSON: {e}") from e
        return normalize_clip_payload(gloss, payload)


class SqliteClipStore(ClipStore):
    """Clips stored in the ``signs`` table of the clip catalogue."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or PATHS['clip_db']

    async def fetch_clip(self, gloss: str) -> Clip:
        sign = database.get_sign_by_word(gloss.lower(), db_path=self.db_path)
        if sign is None:
            raise ClipNotFound(gloss, 'not in catalogue')
        try:
            payload = json.loads(sign['frames_json'] or '[]')
        except ValueError as e:
            raise ClipNotFound(gloss, f"corrupt catalogue entry: {e}") from e
        return normalize_clip_payload(gloss, payload, default_fps=sign.get('frame_rate'))


def catalogue_has_clips(db_path: Optional[str] = None) -> bool:
    """True when the SQLite catalogue exists and holds at least one sign."""
    db_path = db_path or PATHS['clip_db']
    if not Path(db_path).exists():
        return False
    try:
        return database.get_sign_stats(db_path=db_path)['total_signs'] > 0
    except sqlite3.Error as e:
        logger.warning(f"Clip catalogue unreadable, ignoring it: {e}")
        return False


def clip_store_from_config(lexicon: Optional[Lexicon] = None) -> ClipStore:
    """Pick the clip source: HTTP base URL, else a non-empty SQLite catalogue, else JSON directory."""
    if PATHS['clip_base_url']:
        return HttpClipStore(lexicon=lexicon, timeout_s=PLAYBACK_CONFIG['clip_timeout_s'])
    if catalogue_has_clips():
        return SqliteClipStore()
    return JsonClipStore(lexicon=lexicon)
