"""
ISL Gloss Service
Translates sentences to ISL gloss sequences and streams sign playback over WebSocket
"""

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
import os
import logging

from islgloss.api import register_routes
from islgloss.database import get_sign_stats, init_db
from islgloss.live import AsyncRunner
from islgloss.player.clips import clip_store_from_config
from islgloss.shared.config import LOGGING, PATHS
from islgloss.translator import IslTranslator

# Configure logging
logging.basicConfig(
    level=LOGGING['level'],
    format=LOGGING['format'],
    datefmt=LOGGING['date_format']
)
logger = logging.getLogger(__name__)

# Initialize Flask
app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key')

# CORS - allow the web player to call us
CORS(app, resources={
    r"/*": {
        "origins": [
            "http://localhost:3000",  # Web player
            "http://localhost:5173",  # Vite dev (for direct testing)
        ]
    }
})

# Initialize SocketIO
socketio = SocketIO(app, cors_allowed_origins="*")

# Initialize clip catalogue
try:
    os.makedirs(os.path.dirname(PATHS['clip_db']), exist_ok=True)
    init_db()
    logger.info("✓ Clip catalogue initialized")
except Exception as e:
    logger.error(f"✗ Clip catalogue initialization failed: {e}")

# Shared translator, clip source and event loop
translator = IslTranslator()
clip_store = clip_store_from_config(translator.lexicon)
runner = AsyncRunner()

register_routes(app, translator=translator, clip_store=clip_store, runner=runner)

# Health check
@app.route('/health', methods=['GET'])
def health():
    """Health check for monitoring"""
    return jsonify({
        'status': 'healthy',
        'service': 'isl-gloss-service',
        'version': '1.0.0'
    })

# Status endpoint
@app.route('/status', methods=['GET'])
def status():
    """Detailed status"""
    index = translator.semantic_index
    try:
        catalogue = get_sign_stats()
    except Exception as e:
        logger.warning(f"Clip catalogue unavailable: {e}")
        catalogue = None

    return jsonify({
        'status': 'operational',
        'service': 'isl-gloss-service',
        'vocabulary_size': len(translator.lexicon.vocabulary),
        'fingerspelling_enabled': translator.fingerspelling_enabled,
        'semantic_index': {
            'method': index.method,
            'ready': index.ready,
            'entries': len(index.entries),
            'dimension': index.dimension,
        },
        'clip_source': type(clip_store).__name__,
        'catalogue': catalogue,
        'endpoints': {
            'translate': '/translate',
            'sequence': '/sequence',
            'signs': '/signs',
            'clips': '/clips/<gloss>',
            'health': '/health'
        }
    })

# Import WebSocket handlers
try:
    from islgloss.live import register_socketio_handlers
    register_socketio_handlers(socketio, translator=translator, clip_store=clip_store, runner=runner)
    logger.info("✓ WebSocket handlers registered")
except Exception as e:
    logger.warning(f"✗ WebSocket handlers not available: {e}")

# Error handlers
@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Not found'}), 404

@app.errorhandler(500)
def internal_error(error):
    logger.error(f"Internal error: {error}")
    return jsonify({'error': 'Internal server error'}), 500

if __name__ == '__main__':
    port = int(os.environ.get('ISL_PORT', 8000))

    logger.info("=" * 60)
    logger.info("Starting ISL Gloss Service")
    logger.info("=" * 60)
    logger.info(f"Port: {port}")
    logger.info(f"Endpoints:")
    logger.info(f"  Health:    http://localhost:{port}/health")
    logger.info(f"  Status:    http://localhost:{port}/status")
    logger.info(f"  Translate: http://localhost:{port}/translate")
    logger.info(f"  Clips:     http://localhost:{port}/clips/<gloss>")
    logger.info("=" * 60)

    try:
        socketio.run(
            app,
            host='0.0.0.0',
            port=port,
            debug=os.environ.get('FLASK_ENV') != 'production',
            allow_unsafe_werkzeug=True
        )
    finally:
        runner.close()
