# Purpose: AI casting chat. Resolves project ownership, then hands the turn to the chat pipeline.
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.api.deps import get_current_user, get_pipeline
from stuntpitch.db.session import get_async_session
from stuntpitch.repositories import project_repo
from stuntpitch.schemas.chat import ChatRequest, ChatResponse
from stuntpitch.services.casting.pipeline import ChatPipeline

logger = logging.getLogger("api.chat")

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    pipeline: ChatPipeline = Depends(get_pipeline),
):
    if payload.project_database_id is not None:
        project = await project_repo.get_project(db, payload.project_database_id)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        if project.creator_user_id != user_id:
            raise HTTPException(status_code=403, detail="Access denied to this project")

    logger.info("Chat turn from %s (project=%s): %r", user_id, payload.project_database_id, payload.message[:80])
    try:
        return await pipeline.handle(db, payload)
    except Exception as e:
        logger.exception("Chat pipeline failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to process request",
                "response": "I'm having trouble processing your request right now. Please try again.",
                "profiles": [],
                "pipeline": "two-agent-failed",
            },
        )
