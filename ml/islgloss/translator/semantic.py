"""
Semantic fallback for unresolved words.

A small vector index over the vocabulary answers "which gloss is this raw
word closest to?". Vectors come from a deterministic local hashed embedding
or, when configured, from a remote embedding endpoint. The index is built
lazily by the first caller; concurrent callers share the same build.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import aiohttp
import numpy as np

from ..shared.config import SEMANTIC_CONFIG
from .lexicon import DEFAULT_LEXICON, Lexicon
from .segmenter import Token, TokenKind

logger = logging.getLogger(__name__)

_VOWELS = frozenset('aeiou')


class ProviderUnavailable(RuntimeError):
    """The remote embedding provider failed or returned malformed data."""


def _hash_string(text: str) -> int:
    value = 0
    for ch in text:
        value = (value * 31 + ord(ch)) & 0xFFFFFFFF
    return value


def word_token_count(text: str) -> int:
    return len((text or '').split()) or 1


class LocalEmbedder:
    """
    Deterministic bag-of-features embedding.

    Layout of a vector of width ``dim``:
        [0, hash_space)            character-position and trigram hash slots
        hash_space                 length feature, min(3, len / 4)
        hash_space + 1             vowel count
        last len(categories)       one binary slot per semantic category
    """

    def __init__(self, category_keywords: Optional[Dict[str, List[str]]] = None, dim: int = 64):
        self.category_keywords = dict(
            DEFAULT_LEXICON.category_keywords if category_keywords is None else category_keywords
        )
        self.categories = list(self.category_keywords)
        self.dim = dim
        extra = len(self.categories) + 2
        self.hash_space = max(16, dim - extra)
        if self.hash_space + extra > dim:
            raise ValueError(f"Embedding width {dim} too small for {len(self.categories)} categories")

    def category_activations(self, text: str) -> List[int]:
        activations = []
        for name in self.categories:
            keywords = self.category_keywords.get(name) or ()
            activations.append(1 if any(kw in text for kw in keywords) else 0)
        return activations

    def embed(self, text: str) -> np.ndarray:
        cleaned = (text or '').lower().strip()
        vec = np.zeros(self.dim, dtype=np.float32)
        if not cleaned:
            return vec

        space = self.hash_space
        for i, ch in enumerate(cleaned):
            vec[(ord(ch) + i) % space] += 1.0
            if i < len(cleaned) - 2:
                vec[_hash_string(cleaned[i:i + 3]) % space] += 0.5

        vec[space] = min(3.0, len(cleaned) / 4)
        vec[space + 1] = sum(1 for ch in cleaned if ch in _VOWELS)

        activations = self.category_activations(cleaned)
        offset = self.dim - len(activations)
        for idx, value in enumerate(activations):
            vec[offset + idx] = value

        return vec


class HttpEmbeddingProvider:
    """
    Remote embedding endpoint.

    Sends ``POST {"text": ...}`` and expects ``{"vector": [...]}`` back.
    """

    def __init__(self, endpoint: str, api_key: Optional[str] = None, timeout_s: Optional[float] = None):
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout_s = timeout_s

    async def embed(self, text: str) -> Optional[np.ndarray]:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.endpoint, json={'text': text}, headers=headers) as resp:
                    if resp.status != 200:
                        logger.warning(f"Embedding endpoint returned HTTP {resp.status} for {text!r}")
                        return None
                    data = await resp.json()
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.warning(f"Embedding endpoint error: {type(e).__name__}: {e}")
            return None

        vector = data.get('vector') if isinstance(data, dict) else None
        if not isinstance(vector, list) or not vector:
            logger.warning(f"Embedding endpoint returned no vector for {text!r}")
            return None
        try:
            return np.asarray([float(v) for v in vector], dtype=np.float32)
        except (TypeError, ValueError):
            logger.warning(f"Embedding endpoint returned a malformed vector for {text!r}")
            return None


@dataclass(frozen=True)
class SemanticIndexEntry:
    word: str
    vector: np.ndarray = field(repr=False, compare=False)
    norm: float
    token_count: int


@dataclass(frozen=True)
class SemanticMatch:
    word: str
    score: float


def cosine_similarity(vec_a: np.ndarray, vec_b: np.ndarray, norm_a: float, norm_b: float) -> float:
    """Cosine similarity with precomputed norms; mismatched widths use the common prefix."""
    if not norm_a or not norm_b:
        return 0.0
    width = min(len(vec_a), len(vec_b))
    return float(np.dot(vec_a[:width], vec_b[:width]) / (norm_a * norm_b))


class SemanticIndex:
    """
    Lazily built nearest-neighbour index over the vocabulary.

    Owns the index entries and the embedding cache. One instance is shared by
    every translation in a process; entries never change once ready.

    Lifecycle: uninitialized -> building (shared future) -> ready.
    """

    def __init__(
        self,
        vocabulary: Optional[Sequence[str]] = None,
        provider=None,
        min_similarity: Optional[float] = None,
        embedder: Optional[LocalEmbedder] = None,
    ):
        self.vocabulary = list(DEFAULT_LEXICON.vocabulary if vocabulary is None else vocabulary)
        self.provider = provider
        self.min_similarity = SEMANTIC_CONFIG['min_similarity'] if min_similarity is None else min_similarity
        self.embedder = embedder or LocalEmbedder(dim=SEMANTIC_CONFIG['local_dim'])

        self.method = 'remote' if provider is not None else 'local'
        self.ready = False
        self.entries: List[SemanticIndexEntry] = []
        self.dimension = self.embedder.dim
        self.cache: Dict[str, np.ndarray] = {}
        self._pending: Optional[asyncio.Future] = None

    @classmethod
    def from_config(cls, lexicon: Optional[Lexicon] = None) -> 'SemanticIndex':
        lexicon = lexicon or DEFAULT_LEXICON
        provider = None
        if SEMANTIC_CONFIG['endpoint']:
            provider = HttpEmbeddingProvider(
                SEMANTIC_CONFIG['endpoint'],
                api_key=SEMANTIC_CONFIG['api_key'],
                timeout_s=SEMANTIC_CONFIG['timeout_s'],
            )
        return cls(
            vocabulary=lexicon.vocabulary,
            provider=provider,
            embedder=LocalEmbedder(lexicon.category_keywords, dim=SEMANTIC_CONFIG['local_dim']),
        )

    async def ensure_ready(self) -> 'SemanticIndex':
        """Build the index on first use; concurrent first callers await one build."""
        if self.ready:
            return self
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._build())
            self._pending.add_done_callback(self._build_done)
        await asyncio.shield(self._pending)
        return self

    def _build_done(self, future: asyncio.Future):
        # a failed build is forgotten so the next lookup retries it
        if future.cancelled():
            self._pending = None
        elif future.exception() is not None:
            logger.error(f"Semantic index build failed: {future.exception()}")
            self._pending = None

    async def _build(self):
        if self.provider is not None:
            try:
                entries = await self._build_remote()
            except ProviderUnavailable as e:
                logger.warning(f"Remote embedding index unavailable, using local embeddings: {e}")
            else:
                self.method = 'remote'
                self.entries = entries
                self.dimension = len(entries[0].vector) if entries else 0
                self.ready = True
                logger.info(f"Semantic index ready: {len(entries)} entries (remote, dim={self.dimension})")
                return

        self.method = 'local'
        self.entries = self._build_local()
        self.dimension = self.embedder.dim
        self.ready = True
        logger.info(f"Semantic index ready: {len(self.entries)} entries (local, dim={self.dimension})")

    def _make_entry(self, word: str, vector: np.ndarray) -> SemanticIndexEntry:
        return SemanticIndexEntry(
            word=word,
            vector=vector,
            norm=float(np.linalg.norm(vector)),
            token_count=word_token_count(word),
        )

    def _build_local(self) -> List[SemanticIndexEntry]:
        return [self._make_entry(word, self.embedder.embed(word)) for word in self.vocabulary]

    async def _build_remote(self) -> List[SemanticIndexEntry]:
        entries = []
        for word in self.vocabulary:
            vector = await self.provider.embed(word)
            if vector is None:
                raise ProviderUnavailable(f"no embedding for vocabulary word {word!r}")
            entries.append(self._make_entry(word, vector))
        return entries

    async def embed(self, text: str) -> Optional[np.ndarray]:
        """Embed a query with the index's method, through the cache."""
        key = (text or '').lower()
        if key in self.cache:
            return self.cache[key]

        if self.method == 'remote' and self.provider is not None:
            vector = await self.provider.embed(text)
            if vector is None:
                return None
        else:
            vector = self.embedder.embed(text)
        self.cache[key] = vector
        return vector

    async def resolve(self, token: Token) -> Optional[SemanticMatch]:
        """
        Find the closest vocabulary entry for a token.

        Only entries with the same word count as the token are compared.

        Returns:
            The best match if it clears the similarity floor, else None
        """
        await self.ensure_ready()
        if not self.entries:
            return None

        query = token.lemma or token.normalized or token.original
        vector = await self.embed(query)
        if vector is None:
            return None
        norm = float(np.linalg.norm(vector))
        if not norm:
            return None

        query_tokens = word_token_count(token.original or token.lemma or token.normalized)
        best: Optional[SemanticMatch] = None
        for entry in self.entries:
            if entry.token_count != query_tokens:
                continue
            if not entry.norm:
                continue
            score = cosine_similarity(vector, entry.vector, norm, entry.norm)
            if best is None or score > best.score:
                best = SemanticMatch(entry.word, score)

        if best is not None and best.score >= self.min_similarity:
            return best
        return None


async def apply_semantic_fallback(tokens: List[Token], index: SemanticIndex):
    """
    Try to resolve every raw token through the semantic index.

    Args:
        tokens: Segmenter output
        index: Shared semantic index

    Returns:
        Tuple of (new token list, applied substitutions). Input tokens are not
        modified; resolved raw tokens are replaced by semantic copies.
    """
    if not any(t.kind == TokenKind.RAW for t in tokens):
        return list(tokens), []

    await index.ensure_ready()
    resolved_tokens = []
    applied = []
    for i, token in enumerate(tokens):
        if token.kind != TokenKind.RAW:
            resolved_tokens.append(token)
            continue
        match = await index.resolve(token)
        if match is None:
            resolved_tokens.append(token)
            continue
        logger.debug(f"Semantic match: {token.original!r} -> {match.word!r} ({match.score:.3f})")
        resolved_tokens.append(token.as_semantic_match(match.word, match.score))
        applied.append({
            'index': i,
            'original': token.original,
            'canonical': match.word,
            'score': match.score,
        })
    return resolved_tokens, applied
