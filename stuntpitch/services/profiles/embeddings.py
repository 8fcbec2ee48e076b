"""Backfill profile embeddings used by the chat's vector fallback."""
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.repositories import profile_repo
from stuntpitch.schemas.profile import ProfileRecord
from stuntpitch.services.common.embedding_client import profile_embedding_text

logger = logging.getLogger("profiles.embeddings")


async def generate_missing_embeddings(session: AsyncSession, embedder: Any, *, limit: int = 100) -> dict:
    profiles = await profile_repo.profiles_missing_embedding(session, limit=limit)
    if not profiles:
        return {"processed": 0, "failed": 0}

    texts = [profile_embedding_text(ProfileRecord.from_orm_profile(p)) for p in profiles]
    loop = asyncio.get_running_loop()
    try:
        vectors = await loop.run_in_executor(None, partial(embedder.embed_many, texts))
    except Exception as e:
        logger.error("Embedding batch failed for %d profiles: %s", len(profiles), e)
        return {"processed": 0, "failed": len(profiles)}

    processed = failed = 0
    for profile, vector in zip(profiles, vectors):
        try:
            await profile_repo.set_embedding(session, profile, vector)
            processed += 1
        except Exception as e:
            logger.warning("Could not store embedding for profile %s: %s", profile.id, e)
            await session.rollback()
            failed += 1
    logger.info("Embeddings generated: processed=%d failed=%d", processed, failed)
    return {"processed": processed, "failed": failed}
