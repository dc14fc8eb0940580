import json
import logging
import sqlite3
from pathlib import Path

from .shared.config import PATHS
from .translator.lexicon import CLIP_FILE_SUFFIX, DEFAULT_LEXICON

logger = logging.getLogger(__name__)


def get_db_connection(db_path=None):
    """Get a connection to the SQLite clip catalogue."""
    conn = sqlite3.connect(db_path or PATHS['clip_db'])
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path=None):
    """Initialize the catalogue with required tables."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS signs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            word TEXT NOT NULL UNIQUE,
            filename TEXT,
            category TEXT,
            frame_rate REAL DEFAULT 30,
            frame_count INTEGER DEFAULT 0,
            frames_json TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    conn.commit()
    conn.close()
    logger.info("Clip catalogue initialized")


def add_sign(word, frames, frame_rate=30, filename=None, category=None, db_path=None):
    """
    Add a clip to the catalogue.

    Args:
        word: Gloss (stored lower-cased)
        frames: List of raw frame payloads (JSON-serialisable)
        frame_rate: Declared frames per second
        filename: Source clip file stem
        category: Semantic category name

    Returns:
        Row id, or None if the word already exists
    """
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute('''
            INSERT INTO signs (word, filename, category, frame_rate, frame_count, frames_json)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (word.lower(), filename, category, frame_rate, len(frames), json.dumps(frames)))
        conn.commit()
        return cursor.lastrowid
    except sqlite3.IntegrityError:
        logger.warning(f"Sign '{word}' already exists")
        return None
    finally:
        conn.close()


def get_all_signs(db_path=None):
    """Get all catalogue entries without frame payloads."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()
    cursor.execute('SELECT id, word, filename, category, frame_rate, frame_count FROM signs ORDER BY word')
    signs = cursor.fetchall()
    conn.close()
    return [dict(sign) for sign in signs]


def get_sign_by_word(word, db_path=None):
    """Get a catalogue entry, frames included, by gloss."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()
    cursor.execute(
        'SELECT id, word, filename, category, frame_rate, frame_count, frames_json FROM signs WHERE word = ?',
        (word.lower(),)
    )
    sign = cursor.fetchone()
    conn.close()
    return dict(sign) if sign else None


def get_sign_stats(db_path=None):
    """Get statistics about catalogued clips."""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute("SELECT COUNT(*) FROM signs")
        total = cursor.fetchone()[0]

        cursor.execute("SELECT category, COUNT(*) FROM signs GROUP BY category")
        by_category = {row[0]: row[1] for row in cursor.fetchall()}

        return {
            'total_signs': total,
            'by_category': by_category,
        }
    finally:
        conn.close()


def category_for(word, lexicon=None):
    """First semantic category whose keyword list names the word."""
    lexicon = lexicon or DEFAULT_LEXICON
    for name, keywords in lexicon.category_keywords.items():
        if word in keywords:
            return name
    return 'other'


def import_clip_directory(clip_dir, lexicon=None, db_path=None):
    """
    Load every vocabulary clip found in a canonical JSON directory.

    Missing or unreadable files are skipped with a warning.

    Returns:
        Number of clips added
    """
    lexicon = lexicon or DEFAULT_LEXICON
    clip_dir = Path(clip_dir)
    init_db(db_path)

    added = 0
    for word in lexicon.vocabulary:
        filename = lexicon.clip_filename(word)
        path = clip_dir / f"{filename}{CLIP_FILE_SUFFIX}"
        try:
            with open(path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping '{word}': {e}")
            continue

        if isinstance(payload, dict):
            frames = payload.get('sequence') or payload.get('frames') or []
            frame_rate = payload.get('frame_rate') or payload.get('fps') or 30
        else:
            frames = payload
            frame_rate = 30

        if add_sign(word, frames, frame_rate, filename=filename,
                    category=category_for(word, lexicon), db_path=db_path) is not None:
            added += 1

    logger.info(f"Imported {added} clips from {clip_dir}")
    return added
