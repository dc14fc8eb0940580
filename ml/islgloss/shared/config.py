"""
Shared configuration for the ISL gloss translator and playback service.

Every setting can be overridden from the environment so the same code runs
in local development and in a deployed service.
"""

import os
from pathlib import Path


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_float(name, default):
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return float(value)


# Environment Detection
_is_production = os.getenv('ISL_ENVIRONMENT', '').lower() == 'production'
_base_dir = Path(os.getenv('ISL_DATA_DIR', Path(__file__).parent.parent.parent / 'data'))

# Semantic Fallback Configuration
SEMANTIC_CONFIG = {
    # Minimum cosine similarity for a semantic substitution (local scale)
    'min_similarity': _env_float('ISL_SEMANTIC_MIN_SIMILARITY', 0.85),

    # Remote embedding endpoint (None = local hashed embedding)
    'endpoint': os.getenv('ISL_EMBEDDING_ENDPOINT') or None,

    # Bearer token for the remote endpoint
    'api_key': os.getenv('ISL_EMBEDDING_API_KEY') or None,

    # Request timeout in seconds (None = wait indefinitely)
    'timeout_s': _env_float('ISL_EMBEDDING_TIMEOUT', None),

    # Width of the local embedding vector
    'local_dim': 64,
}

# Fingerspelling Configuration
FINGERSPELL_CONFIG = {
    # Spell words that have no motion clip
    'enabled': _env_bool('ISL_FINGERSPELLING', True),

    # Directory holding A.jpg..Z.jpg, 0.jpg..9.jpg (None = all letters displayable)
    'image_dir': os.getenv('ISL_FINGERSPELL_IMAGES') or None,

    # Time each letter stays on screen
    'letter_delay_ms': 600,

    # Time the completed word stays on screen before the overlay closes
    'end_delay_ms': 800,
}

# Playback Configuration
PLAYBACK_CONFIG = {
    # Frame rate used when a clip does not declare one
    'default_fps': 30,

    # Declared frame rates are clamped into this range
    'min_fps': 1,
    'max_fps': 120,

    # Display refresh rate driving the animation clock
    'refresh_hz': 60,

    # Clip fetch timeout in seconds (None = wait indefinitely)
    'clip_timeout_s': _env_float('ISL_CLIP_TIMEOUT', None),

    # Restart the sentence when the last word finishes
    'loop': _env_bool('ISL_LOOP_SENTENCE', False),
}

# Directory Paths
PATHS = {
    'data_root': str(_base_dir),
    'clip_dir': os.getenv('ISL_CLIP_DIR', str(_base_dir / 'canonical')),
    'clip_db': os.getenv('ISL_CLIP_DB', str(_base_dir / 'isl_clips.db')),
    'clip_base_url': os.getenv('ISL_CLIP_BASE_URL') or None,
}

# Logging Configuration
LOGGING = {
    'level': 'INFO' if _is_production else os.getenv('ISL_LOG_LEVEL', 'INFO'),
    'format': '[ISL] %(asctime)s [%(levelname)s] %(name)s: %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
}
