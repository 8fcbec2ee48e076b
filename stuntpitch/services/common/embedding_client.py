# stuntpitch/services/common/embedding_client.py
"""Embedding client for profile vectors (OpenAI embeddings endpoint).
Used for the embedding backfill and the vector fallback when structured filters match nobody."""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from openai import OpenAI, APIConnectionError, RateLimitError, BadRequestError
from stuntpitch.core.config import settings
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.services.common.retry import retry_on_overload

logger = logging.getLogger("ai.embed")

_client: Optional[OpenAI] = None


def _require_api_key() -> str:
    if not settings.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY is not set. Please add it to your environment or .env file.")
    return settings.OPENAI_API_KEY


def _get_openai_client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(api_key=_require_api_key())
        logger.info("OpenAI embedding client initialized")
    return _client


def profile_embedding_text(profile: ProfileRecord) -> str:
    """Flatten the searchable parts of a profile into one string for embedding."""
    parts = [profile.full_name]
    if profile.bio:
        parts.append(profile.bio)
    location = profile.primary_location_structured or profile.location
    if location:
        parts.append(f"Location: {location}")
    if profile.gender:
        parts.append(f"Gender: {profile.gender}")
    if profile.ethnicity:
        parts.append(f"Ethnicity: {profile.ethnicity}")
    if profile.skill_ids:
        parts.append(f"Skills: {', '.join(profile.skill_ids)}")
    certs = [c.certification_id for c in profile.profile_certifications]
    if certs:
        parts.append(f"Certifications: {', '.join(certs)}")
    if profile.union_status:
        parts.append(f"Union: {profile.union_status}")
    return "\n".join(parts)


class EmbeddingClient:
    def __init__(self, model: Optional[str] = None):
        self.model = model or settings.OPENAI_EMBEDDING_MODEL
        logger.info(f"Initialized EmbeddingClient with OpenAI model: {self.model}")

    def embed(self, text: str, timeout: int = 60) -> List[float]:
        """
        Generate a single embedding vector for the given text.
        """
        try:
            resp = self._create(input=text, timeout=timeout)
            vec = resp.data[0].embedding
            logger.debug("Generated embedding vector (dim=%d)", len(vec))
            return vec
        except (APIConnectionError, RateLimitError, BadRequestError) as e:
            logger.exception("OpenAI embed error: %s", e)
            raise

    def embed_many(self, texts: Sequence[str], *, timeout: int = 90, batch_size: int = 64) -> List[List[float]]:
        if not texts:
            return []
        vectors: List[List[float]] = []
        for i in range(0, len(texts), max(1, batch_size)):
            batch = list(texts[i : i + batch_size])
            resp = self._create(input=batch, timeout=timeout)
            vectors.extend(d.embedding for d in resp.data)
            logger.debug("Embedded batch of %d items", len(batch))
        return vectors

    @retry_on_overload
    def _create(self, *, input, timeout: int):
        return _get_openai_client().embeddings.create(model=self.model, input=input, timeout=timeout)


default_embedding_client = EmbeddingClient()
