"""
Embedding service: load sentence-transformers all-MiniLM-L6-v2 once (singleton).
Same model the communities table was indexed with; text queries must match it.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Lazy-loaded singleton; loaded on first text query to avoid blocking app startup.
_model: Any = None
MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"


def _get_model() -> Any:
    """Load model once; return cached instance."""
    global _model
    if _model is None:
        try:
            from sentence_transformers import SentenceTransformer

            _model = SentenceTransformer(MODEL_NAME)
            logger.info("Loaded embedding model: %s", MODEL_NAME)
        except Exception as e:
            logger.exception("Failed to load embedding model: %s", e)
            raise
    return _model


def generate_embeddings(texts: list[str]) -> list[list[float]]:
    """Normalized 384-dim embeddings for a batch of texts, in input order."""
    if not texts:
        return []
    model = _get_model()
    # normalize_embeddings=True for cosine distance
    arr = model.encode(texts, normalize_embeddings=True)
    return [row.tolist() for row in arr]
