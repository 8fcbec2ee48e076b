# stuntpitch/api/deps.py
# Request-scoped dependencies shared by the routers.
from typing import Optional

from fastapi import Header, HTTPException, Request

from stuntpitch.services.casting.pipeline import ChatPipeline


async def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """Authentication happens upstream; the proxy forwards the user id in X-User-Id."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


async def get_optional_user(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def get_pipeline(request: Request) -> ChatPipeline:
    state = request.app.state
    return ChatPipeline(state.pipeline_config, llm=state.llm, embedder=state.embedder)
