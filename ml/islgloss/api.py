"""
REST endpoints for translation and clip lookup.

Provides sentence translation, gloss recomputation from edited tokens, the
available vocabulary and normalized motion clips.
"""

import asyncio
import logging

from flask import jsonify, request

from .player.clips import ClipNotFound, clip_store_from_config, is_clip_name
from .translator import IslTranslator, Token

logger = logging.getLogger(__name__)


def register_routes(app, translator=None, clip_store=None, runner=None):
    """
    Register translation API routes with Flask app.

    Args:
        app: Flask application
        translator: IslTranslator (built from config if None)
        clip_store: Clip source for ``/clips`` (built from config if None)
        runner: Background event loop runner shared with the live handlers;
            coroutines run with ``asyncio.run`` when None
    """
    translator = translator or IslTranslator()
    clip_store = clip_store or clip_store_from_config(translator.lexicon)

    def run(coro):
        if runner is not None:
            return runner.run(coro)
        return asyncio.run(coro)

    # ========== TRANSLATION ==========

    @app.route('/translate', methods=['POST'])
    def translate():
        """
        Translate a sentence to an ISL gloss sequence.

        Request body:
            {'text': 'the pc is loud'}

        Returns:
            {
                'success': True,
                'conversion': {'gloss_sequence': [...], 'tokens': [...], ...}
            }
        """
        try:
            data = request.get_json(silent=True) or {}
            text = data.get('text')
            if not isinstance(text, str) or not text.strip():
                return jsonify({'success': False, 'error': 'text required'}), 400

            conversion = run(translator.translate(text))
            return jsonify({
                'success': True,
                'conversion': conversion.to_dict(),
            })
        except Exception as e:
            logger.error(f"Translation failed: {e}")
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/sequence', methods=['POST'])
    def sequence():
        """
        Recompute the gloss sequence from a token list with edited ``accepted`` flags.

        Request body:
            {'tokens': [<token dicts from /translate>]}
        """
        data = request.get_json(silent=True) or {}
        raw_tokens = data.get('tokens')
        if not isinstance(raw_tokens, list):
            return jsonify({'success': False, 'error': 'tokens list required'}), 400

        try:
            tokens = [Token.from_dict(t) for t in raw_tokens]
        except (KeyError, TypeError, ValueError, IndexError) as e:
            return jsonify({'success': False, 'error': f'invalid token: {e}'}), 400

        return jsonify({
            'success': True,
            'gloss_sequence': translator.rebuild_sequence(tokens),
        })

    # ========== VOCABULARY & CLIPS ==========

    @app.route('/signs', methods=['GET'])
    def list_signs():
        """List glosses with a motion clip and their aliases."""
        signs = translator.get_available_signs()
        return jsonify({
            'success': True,
            'signs': signs,
            'aliases': translator.lexicon.aliases,
            'count': len(signs),
        })

    @app.route('/clips/<gloss>', methods=['GET'])
    def get_clip(gloss):
        """Get the normalized motion clip for one gloss."""
        if not is_clip_name(gloss):
            return jsonify({'success': False, 'error': 'Invalid gloss'}), 400

        try:
            clip = run(clip_store.fetch_clip(gloss.lower()))
        except ClipNotFound as e:
            return jsonify({'success': False, 'error': f'Clip not found: {e.reason}'}), 404
        except Exception as e:
            logger.error(f"Clip load failed for '{gloss}': {e}")
            return jsonify({'success': False, 'error': str(e)}), 500

        if not clip.frames:
            return jsonify({'success': False, 'error': f'No frames in {gloss}'}), 404

        return jsonify({
            'success': True,
            'clip': clip.to_dict(),
        })
