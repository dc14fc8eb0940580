"""
Tests for clip payload normalization and the clip stores.
"""

import asyncio
import json

import numpy as np
import pytest

from islgloss import database
from islgloss.player import clips
from islgloss.player.clips import (
    ClipNotFound,
    JsonClipStore,
    SqliteClipStore,
    clamp_frame_rate,
    clip_store_from_config,
    frame_from_payload,
    is_clip_name,
    normalize_clip_payload,
)
from islgloss.translator.lexicon import Lexicon


class TestFramePayload:

    def test_named_groups(self):
        frame = frame_from_payload({
            'pose': [[0.1, 0.2, 0.3], [0.4, 0.5]],
            'left_hand': [{'x': 1, 'y': 2, 'z': 3}, {'x': 4, 'y': 5}],
        })
        assert set(frame.groups) == {'pose', 'left_hand'}
        assert frame.groups['pose'].shape == (2, 3)
        assert frame.groups['pose'].dtype == np.float32
        assert frame.groups['pose'][1, 2] == 0
        assert frame.groups['left_hand'].tolist() == [[1, 2, 3], [4, 5, 0]]

    def test_bare_point_list_is_pose(self):
        frame = frame_from_payload([[0, 1], [2, 3]])
        assert list(frame.groups) == ['pose']

    def test_nested_lists(self):
        frame = frame_from_payload({'hands': [[[0, 0], [1, 1]], [[2, 2]]]})
        assert set(frame.groups) == {'hands_0', 'hands_1'}
        assert frame.groups['hands_1'].shape == (1, 3)

    def test_unknown_shapes_are_ignored(self):
        frame = frame_from_payload({'meta': 'x', 'score': 0.5})
        assert frame.groups == {}


class TestNormalizeClip:

    def test_bare_frame_list(self):
        clip = normalize_clip_payload('hat', [{'pose': [[0, 0]]}] * 3)
        assert len(clip) == 3
        assert clip.frame_rate == 30

    def test_sequence_and_frame_rate_take_precedence(self):
        clip = normalize_clip_payload('hat', {
            'frames': [[[0, 0]]],
            'sequence': [[[0, 0]], [[1, 1]]],
            'fps': 24,
            'frame_rate': 25,
        })
        assert len(clip.frames) == 2
        assert clip.frame_rate == 25

    @pytest.mark.parametrize('fps,expected', [
        (500, 120),
        (0.2, 1),
        (0, 30),
        ('fast', 30),
        (None, 30),
        (float('nan'), 30),
    ])
    def test_frame_rate_clamped(self, fps, expected):
        assert clamp_frame_rate(fps) == expected

    def test_missing_frames_gives_empty_clip(self):
        clip = normalize_clip_payload('hat', {'fps': 30})
        assert clip.frames == []
        assert clip.duration_ms == 0

    def test_to_dict(self):
        clip = normalize_clip_payload('hat', {'fps': 10, 'frames': [{'pose': [[1, 2, 3]]}]})
        data = clip.to_dict()
        assert data['gloss'] == 'hat'
        assert data['frame_count'] == 1
        assert data['frames'][0]['pose'] == [[1.0, 2.0, 3.0]]
        assert data['duration_ms'] == 100


class TestJsonClipStore:

    def test_fetch(self, tmp_path):
        (tmp_path / 'Hat_canonical_median.json').write_text(
            json.dumps({'fps': 200, 'frames': [{'pose': [[0, 0], [1, 1, 1]]}]}), encoding='utf-8'
        )
        store = JsonClipStore(tmp_path)
        clip = asyncio.run(store.fetch_clip('hat'))
        assert clip.gloss == 'hat'
        assert clip.frame_rate == 120
        assert clip.frames[0].groups['pose'].shape == (2, 3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ClipNotFound) as exc:
            asyncio.run(JsonClipStore(tmp_path).fetch_clip('hat'))
        assert 'Hat_canonical_median.json' in exc.value.reason

    def test_corrupt_file(self, tmp_path):
        (tmp_path / 'Hat_canonical_median.json').write_text('{not json', encoding='utf-8')
        with pytest.raises(ClipNotFound):
            asyncio.run(JsonClipStore(tmp_path).fetch_clip('hat'))

    def test_unmapped_gloss_uses_its_own_name(self, tmp_path):
        (tmp_path / 'zebra_canonical_median.json').write_text('[]', encoding='utf-8')
        clip = asyncio.run(JsonClipStore(tmp_path).fetch_clip('zebra'))
        assert clip.frames == []


class TestCatalogue:

    def test_add_and_fetch(self, tmp_path):
        db_path = str(tmp_path / 'clips.db')
        database.init_db(db_path)

        row_id = database.add_sign('Hat', [{'pose': [[0, 0]]}, {'pose': [[1, 1]]}],
                                   frame_rate=24, category='clothing', db_path=db_path)
        assert row_id is not None
        assert database.add_sign('hat', [], db_path=db_path) is None

        clip = asyncio.run(SqliteClipStore(db_path).fetch_clip('HAT'))
        assert len(clip.frames) == 2
        assert clip.frame_rate == 24

        stats = database.get_sign_stats(db_path)
        assert stats == {'total_signs': 1, 'by_category': {'clothing': 1}}

    def test_missing_word(self, tmp_path):
        db_path = str(tmp_path / 'clips.db')
        database.init_db(db_path)
        with pytest.raises(ClipNotFound):
            asyncio.run(SqliteClipStore(db_path).fetch_clip('hat'))

    def test_import_clip_directory(self, tmp_path):
        clip_dir = tmp_path / 'canonical'
        clip_dir.mkdir()
        (clip_dir / 'Hat_canonical_median.json').write_text(
            json.dumps({'frame_rate': 25, 'sequence': [{'pose': [[0, 0]]}]}), encoding='utf-8'
        )
        (clip_dir / 'Monday_canonical_median.json').write_text(
            json.dumps([{'pose': [[0, 0]]}, {'pose': [[1, 1]]}]), encoding='utf-8'
        )
        db_path = str(tmp_path / 'clips.db')
        lexicon = Lexicon(vocabulary=['hat', 'monday', 'lamp'])

        assert database.import_clip_directory(clip_dir, lexicon, db_path) == 2

        signs = {s['word']: s for s in database.get_all_signs(db_path)}
        assert set(signs) == {'hat', 'monday'}
        assert signs['hat']['category'] == 'clothing'
        assert signs['hat']['frame_rate'] == 25
        assert signs['monday']['frame_count'] == 2
        assert database.category_for('zebra') == 'other'


class TestClipStoreSelection:

    @pytest.fixture
    def data_dir(self, tmp_path, monkeypatch):
        clip_dir = tmp_path / 'canonical'
        clip_dir.mkdir()
        (clip_dir / 'Hat_canonical_median.json').write_text(
            json.dumps({'fps': 20, 'frames': [{'pose': [[0, 0]]}, {'pose': [[1, 1]]}]}), encoding='utf-8'
        )
        monkeypatch.setitem(clips.PATHS, 'clip_dir', str(clip_dir))
        monkeypatch.setitem(clips.PATHS, 'clip_db', str(tmp_path / 'isl_clips.db'))
        monkeypatch.setitem(clips.PATHS, 'clip_base_url', None)
        return tmp_path

    def test_empty_catalogue_uses_clip_directory(self, data_dir):
        # service startup creates the catalogue before choosing a store
        database.init_db(clips.PATHS['clip_db'])

        store = clip_store_from_config()
        assert isinstance(store, JsonClipStore)
        clip = asyncio.run(store.fetch_clip('hat'))
        assert len(clip) == 2
        assert clip.frame_rate == 20

    def test_populated_catalogue_is_preferred(self, data_dir):
        database.import_clip_directory(clips.PATHS['clip_dir'], db_path=clips.PATHS['clip_db'])

        store = clip_store_from_config()
        assert isinstance(store, SqliteClipStore)
        assert len(asyncio.run(store.fetch_clip('hat'))) == 2

    def test_no_catalogue_file(self, data_dir):
        assert isinstance(clip_store_from_config(), JsonClipStore)


@pytest.mark.parametrize('gloss,ok', [
    ('hat', True),
    ('good morning', True),
    ('', False),
    ('..', False),
    ('../x', False),
    ('a/b', False),
    ('..\\x', False),
])
def test_is_clip_name(gloss, ok):
    assert is_clip_name(gloss) is ok


def test_json_store_rejects_path_names(tmp_path):
    (tmp_path / 'x_canonical_median.json').write_text('[]', encoding='utf-8')
    store = JsonClipStore(tmp_path / 'canonical')
    with pytest.raises(ClipNotFound) as exc:
        asyncio.run(store.fetch_clip('../x'))
    assert exc.value.reason == 'invalid clip name'
